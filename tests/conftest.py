import io

import pytest

from scatter_explorer import create_app
from scatter_explorer.state import STATE_STORE


@pytest.fixture(autouse=True)
def clear_state_store():
    STATE_STORE.clear()
    yield
    STATE_STORE.clear()


@pytest.fixture
def app():
    return create_app({"TESTING": True})


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def records():
    return [
        {"x": 1, "y": 2, "label": "a", "image": "img-a"},
        {"x": "3", "y": 4, "label": "b", "image": ""},
        {"x": "", "y": 5, "label": "a"},
        {"x": 7, "y": None, "label": "c"},
        {"x": 9, "y": 10, "label": "b"},
    ]


@pytest.fixture
def upload():
    """Post raw bytes to the upload endpoint under the given file name."""

    def _upload(client, content: bytes, filename: str = "data.csv"):
        return client.post(
            "/api/upload",
            data={"file": (io.BytesIO(content), filename)},
            content_type="multipart/form-data",
        )

    return _upload
