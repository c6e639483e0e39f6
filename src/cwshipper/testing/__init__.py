"""
Testing utilities for cwshipper.

``FakeLogsClient`` is an in-memory remote log service. The pytest fixtures
in ``cwshipper.testing.fixtures`` need pytest installed:
``pip install cwshipper[testing]``.

Example:
    from cwshipper import Ingestor, Settings
    from cwshipper.testing import FakeLogsClient

    async def test_ships():
        client = FakeLogsClient()
        client.add_stream("g", "s")
        ingestor = Ingestor(client, Settings(naming={...}))
        await ingestor.ingest([("tag", 1, {"message": "hi"})])
"""

from .fakes import FakeLogsClient

__all__ = ["FakeLogsClient"]
