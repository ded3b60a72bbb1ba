import asyncio

from iofabric import startup


class FakeProcess:
    def __init__(self, returncode, stderr=b""):
        self.returncode = returncode
        self.stderr = stderr

    async def communicate(self):
        return b"", self.stderr


def fake_exec(process):
    async def create_subprocess_exec(*args, **kwargs):
        create_subprocess_exec.args = args
        return process

    return create_subprocess_exec


async def test_reachable_host_is_kept(monkeypatch):
    exec_ = fake_exec(FakeProcess(0))
    monkeypatch.setattr(asyncio, "create_subprocess_exec", exec_)

    assert await startup.probe_host("iofabric") == "iofabric"
    assert exec_.args == ("ping", "-c", "3", "iofabric")


async def test_unreachable_host_falls_back(monkeypatch):
    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_exec(FakeProcess(2, b"unknown host")))
    assert await startup.probe_host("iofabric") == startup.FALLBACK_HOST


async def test_missing_ping_falls_back(monkeypatch):
    async def missing(*args, **kwargs):
        raise FileNotFoundError("ping")

    monkeypatch.setattr(asyncio, "create_subprocess_exec", missing)
    assert await startup.probe_host("iofabric") == startup.FALLBACK_HOST


async def test_init_applies_fallback(monkeypatch):
    monkeypatch.delenv("SELFNAME", raising=False)

    async def probe(host):
        return startup.FALLBACK_HOST

    monkeypatch.setattr(startup, "probe_host", probe)
    config = await startup.init(host="iofabric", port=1234, argv=["--id=element-9"])

    assert config.host == startup.FALLBACK_HOST
    assert config.port == 1234
    assert config.element_id == "element-9"
