import pytest

import app as webapp


@pytest.fixture
def client():
    webapp.app.config.update(TESTING=True, SECRET_KEY="test-secret", MAX_ARRAY_SIZE=20, MAX_RUNS=100)
    webapp.RUNS.clear()
    with webapp.app.test_client() as c:
        yield c
    webapp.RUNS.clear()
