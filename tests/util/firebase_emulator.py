"""Connection details of a running Firebase emulator suite.

Start the emulators with ``firebase emulators:start --only functions,firestore,storage
--project test-project`` before running ``pytest -m integration``.
"""

import pytest
import requests

base_host = "127.0.0.1"
base_port = 5001
firestore_emulator_port = 8080
storage_emulator_port = 9199
firebase_emulator_base_url = f"http://{base_host}:{base_port}/test-project/us-central1"


def is_emulator_running() -> bool:
    """True when the functions emulator answers on its port."""
    try:
        requests.get(f"http://{base_host}:{base_port}", timeout=2)
        return True
    except requests.RequestException:
        return False


@pytest.fixture(scope="session")
def firebase_emulator():
    """Emulator URLs. Skips the test when the emulators are not running."""
    if not is_emulator_running():
        pytest.skip("Firebase emulators are not running")

    return {
        "base_url": firebase_emulator_base_url,
        "firestore_host": f"localhost:{firestore_emulator_port}",
        "storage_host": f"localhost:{storage_emulator_port}",
        "functions_host": f"localhost:{base_port}",
    }
