"""Shared pytest fixtures: a 35-row dataset, the app, and HTTP clients."""

from __future__ import annotations

from pathlib import Path
from xml.etree import ElementTree

import httpx
import pytest
import pytest_asyncio
from pydantic import SecretStr

from usersearch.config import ClientSettings, SearchSettings, ServerSettings
from usersearch.domain.models import Record
from usersearch.server.app import create_app
from usersearch.services.client import SearchClient

_PEOPLE = [
    ("Boyd", "Wolf", "male"),
    ("Hilda", "Mayer", "female"),
    ("Brooks", "Aguilar", "male"),
    ("Beth", "Wynn", "female"),
    ("Owen", "Lynn", "male"),
    ("Cohen", "Hines", "male"),
    ("Jennings", "Mays", "male"),
    ("Leann", "Travis", "female"),
    ("Glenn", "Jordan", "male"),
    ("Rose", "Carney", "female"),
    ("Henderson", "Maxwell", "male"),
    ("Gilmore", "Guerra", "male"),
    ("Cruz", "Guerrero", "male"),
    ("Whitley", "Davidson", "male"),
    ("Nicholson", "Newman", "male"),
    ("Allison", "Valdez", "male"),
    ("Annie", "Osborn", "female"),
    ("Rebekah", "Sutton", "female"),
    ("Gonzalez", "Anderson", "male"),
    ("Bell", "Bauer", "male"),
    ("Lowery", "York", "male"),
    ("Palmer", "Scott", "male"),
    ("Terrell", "Hall", "male"),
    ("Kane", "Wells", "male"),
    ("Gates", "Spencer", "male"),
    ("Katheryn", "Jacobs", "female"),
    ("Sims", "Cotton", "male"),
    ("Cotton", "Bright", "male"),
    ("Hilda", "Wood", "female"),
    ("Ruth", "Miller", "female"),
    ("Twila", "Horn", "female"),
    ("Johns", "Whitney", "male"),
    ("Christy", "Knapp", "female"),
    ("Twila", "Snow", "female"),
    ("Kane", "Sharp", "male"),
]


def _about(index: int) -> str:
    flavour = "Nulla commodo dolore officia" if index % 3 == 0 else "Lorem ipsum dolor sit amet"
    return f"{flavour}. Entry {index:02d} of the dataset.\n"


def make_records() -> list[Record]:
    return [
        Record(
            id=index,
            first_name=first,
            last_name=last,
            age=20 + (index * 7) % 20,
            about=_about(index),
            gender=gender,
        )
        for index, (first, last, gender) in enumerate(_PEOPLE)
    ]


def write_dataset(path: Path, records: list[Record]) -> Path:
    root = ElementTree.Element("root")
    for record in records:
        row = ElementTree.SubElement(root, "row")
        for tag, value in (
            ("id", record.id),
            ("guid", f"guid-{record.id}"),
            ("first_name", record.first_name),
            ("last_name", record.last_name),
            ("age", record.age),
            ("about", record.about),
            ("gender", record.gender),
        ):
            ElementTree.SubElement(row, tag).text = str(value)
    ElementTree.ElementTree(root).write(path, encoding="utf-8", xml_declaration=True)
    return path


@pytest.fixture
def access_token() -> str:
    return "test-access-token"


@pytest.fixture
def base_url() -> str:
    return "http://testserver/"


@pytest.fixture
def auth_headers(access_token) -> dict[str, str]:
    return {"AccessToken": access_token}


@pytest.fixture
def records() -> list[Record]:
    return make_records()


@pytest.fixture
def dataset_path(tmp_path, records) -> Path:
    return write_dataset(tmp_path / "dataset.xml", records)


@pytest.fixture
def settings(dataset_path, access_token, base_url) -> SearchSettings:
    return SearchSettings(
        server=ServerSettings(access_token=SecretStr(access_token), dataset_path=dataset_path),
        client=ClientSettings(base_url=base_url, access_token=SecretStr(access_token)),
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest_asyncio.fixture
async def http_client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport) as client:
        yield client


@pytest_asyncio.fixture
async def search_client(http_client, access_token, base_url):
    client = SearchClient(access_token, base_url, timeout=5.0, http_client=http_client)
    yield client
    await client.aclose()


@pytest.fixture
def mock_search_client(access_token, base_url):
    """Build a SearchClient whose requests are answered by ``handler``."""

    def _build(handler, **kwargs) -> SearchClient:
        transport = httpx.MockTransport(handler)
        return SearchClient(
            access_token,
            base_url,
            http_client=httpx.AsyncClient(transport=transport),
            **kwargs,
        )

    return _build
