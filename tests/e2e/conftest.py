"""E2E test configuration and fixtures.

Runs the real app under uvicorn on a loopback port.  The static
``configs/config.yaml`` trusts ``127.0.0.1``, so the test client acts as
a trusted proxy.
"""

import multiprocessing
import socket
import time
from typing import Generator

import httpx
import pytest
import uvicorn

_HOST = "127.0.0.1"
_STARTUP_ATTEMPTS = 30


def is_server_running(port: int) -> bool:
    """Check the /health endpoint of a server on the given port."""
    try:
        response = httpx.get(f"http://{_HOST}:{port}/health", timeout=2, trust_env=False)
        return response.status_code == 200
    except httpx.RequestError:
        return False


@pytest.fixture(scope="session")
def server_port() -> int:
    """A free loopback port for the test server."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((_HOST, 0))
        return sock.getsockname()[1]


def run_server(port: int) -> None:
    """Run the uvicorn server in a separate process."""
    uvicorn.run(
        "realip.app:app",
        host=_HOST,
        port=port,
        log_level="warning",
        proxy_headers=False,
    )


@pytest.fixture(scope="session")
def realip_server(server_port: int) -> Generator[int, None, None]:
    """Start the server for the session and tear it down afterwards."""
    process = multiprocessing.Process(target=run_server, args=(server_port,))
    process.start()

    for _ in range(_STARTUP_ATTEMPTS):
        if is_server_running(server_port):
            break
        if not process.is_alive():
            pytest.fail("Server process crashed during startup.", pytrace=False)
        time.sleep(0.5)
    else:
        process.terminate()
        pytest.fail("Server did not start within the timeout period.", pytrace=False)

    yield server_port

    process.terminate()
    process.join(timeout=10)
    if process.is_alive():
        process.kill()
        process.join()


@pytest.fixture
def base_url(realip_server: int) -> str:
    """Base URL of the running server."""
    return f"http://{_HOST}:{realip_server}"
