from __future__ import annotations

from pathlib import Path

import pytest

from simtest.backends.simulator import SimulatorInvoker
from simtest.core.errors import ExternalProcessError

from conftest import write_script


def _image(tmp_path: Path) -> Path:
    image = tmp_path / "prog.mem"
    image.write_text("0:   00a50513\n", encoding="utf-8")
    return image


def test_command_line_flags() -> None:
    invoker = SimulatorInvoker(simulator=Path("/opt/sim"), quiet=True, memory_size=65536)
    argv = invoker.command(Path("a.mem"), Path("out.txt"))
    assert argv == ["/opt/sim", "a.mem", "--dump-to", "out.txt", "--quiet", "-s", "65536"]


def test_command_line_without_optional_flags() -> None:
    invoker = SimulatorInvoker(simulator=Path("/opt/sim"), quiet=False, extra_args=("--suppress-status",))
    argv = invoker.command(Path("a.mem"), Path("out.txt"))
    assert argv == ["/opt/sim", "a.mem", "--dump-to", "out.txt", "--suppress-status"]


def test_invoke_writes_result(tmp_path: Path, fake_simulator: Path) -> None:
    result = tmp_path / "results" / "prog.txt"
    run = SimulatorInvoker(simulator=fake_simulator).invoke(_image(tmp_path), result)
    assert run.returncode == 0
    assert result.read_text(encoding="utf-8").splitlines()[1] == "a0:0x0000000a"


def test_nonzero_exit_is_recorded_not_raised(
    tmp_path: Path, fake_simulator: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setenv("FAKE_SIM_EXIT", "3")
    result = tmp_path / "prog.txt"
    run = SimulatorInvoker(simulator=fake_simulator).invoke(_image(tmp_path), result)
    assert run.returncode == 3
    assert result.exists()
    assert "exited with status 3" in caplog.text


def test_crash_without_dump_is_not_an_invocation_error(
    tmp_path: Path, fake_simulator: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("FAKE_SIM_NO_DUMP", "1")
    monkeypatch.setenv("FAKE_SIM_EXIT", "101")
    result = tmp_path / "prog.txt"
    run = SimulatorInvoker(simulator=fake_simulator).invoke(_image(tmp_path), result)
    assert run.returncode == 101
    assert not result.exists()


def test_missing_simulator(tmp_path: Path) -> None:
    invoker = SimulatorInvoker(simulator=tmp_path / "no-such-sim")
    with pytest.raises(ExternalProcessError) as exc:
        invoker.invoke(_image(tmp_path), tmp_path / "prog.txt")
    assert "could not be started" in str(exc.value)


def test_hung_simulator_times_out(tmp_path: Path) -> None:
    sim = write_script(tmp_path / "hang-sim", "import time\ntime.sleep(10)\n")
    with pytest.raises(ExternalProcessError) as exc:
        SimulatorInvoker(simulator=sim, timeout=0.5).invoke(_image(tmp_path), tmp_path / "prog.txt")
    assert "timed out" in str(exc.value)
