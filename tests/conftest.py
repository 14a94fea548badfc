import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./creator_portal.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ADMIN_EMAIL", "admin@example.com")
os.environ.setdefault("ADMIN_PASSWORD", "admin123")

import httpx  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from app.core.database import Base, get_db  # noqa: E402
from app.core.deps import get_storage  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.main import app  # noqa: E402
from app.models.creator import Creator, CreatorMedia  # noqa: E402
from app.models.location import Location  # noqa: E402
from app.services.storage import DeleteResult, LocalStorage, MediaStorage, StoredFile  # noqa: E402


@pytest_asyncio.fixture
async def db(tmp_path):
    url = os.getenv("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    eng = create_async_engine(url, echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(eng, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


REMOTE_IMAGE_HOST = "images.test"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def _remote_images(request: httpx.Request) -> httpx.Response:
    if request.url.host == REMOTE_IMAGE_HOST:
        return httpx.Response(200, content=PNG_BYTES, headers={"content-type": "image/png"})
    return httpx.Response(404, text="not found")


class RecordingStorage(MediaStorage):
    """Local storage that remembers destroy calls and can be told to fail them.

    Remote fetches never leave the process: only ``images.test`` serves an image.
    """

    def __init__(self, root: str):
        self.local = LocalStorage(root, transport=httpx.MockTransport(_remote_images))
        self.destroyed: list[tuple[str, str]] = []
        self.destroy_result: DeleteResult | None = None

    async def upload(self, data: bytes, filename: str, content_type: str, folder: str) -> StoredFile:
        return await self.local.upload(data, filename, content_type, folder)

    async def upload_from_url(self, url: str, folder: str) -> StoredFile:
        return await self.local.upload_from_url(url, folder)

    def hosts(self, url: str) -> bool:
        return self.local.hosts(url)

    async def destroy(self, public_id: str, resource_type: str = "image") -> DeleteResult:
        self.destroyed.append((public_id, resource_type))
        if self.destroy_result is not None:
            return self.destroy_result
        return await self.local.destroy(public_id, resource_type)


@pytest_asyncio.fixture
async def storage(tmp_path):
    return RecordingStorage(str(tmp_path / "uploads"))


@pytest_asyncio.fixture
async def client(db, storage):
    async def _override_db():
        yield db

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[get_storage] = lambda: storage
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def auth_headers() -> dict:
    token = create_access_token("admin@example.com")
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def creator(db: AsyncSession):
    c = Creator(
        name="Test Creator",
        genre="Comedy",
        avatar="https://res.cloudinary.com/demo/image/upload/v1700000000/creator-avatars/abc123.jpg",
        platform="Instagram",
        social_link="https://instagram.com/testcreator",
        location="Mumbai",
        bio="Test bio",
        followers=5000,
        total_views=120000,
        average_views=4000,
        reels=["reel one"],
        media=[],
    )
    db.add(c)
    await db.commit()
    return c


@pytest_asyncio.fixture
async def other_creator(db: AsyncSession):
    c = Creator(
        name="Another Person",
        genre="Tech",
        platform="YouTube",
        social_link="https://youtube.com/@another",
        location="Delhi",
        followers=90000,
        total_views=5000000,
        media=[],
    )
    db.add(c)
    await db.commit()
    return c


@pytest_asyncio.fixture
async def creator_with_media(db: AsyncSession, creator: Creator):
    creator.media.append(
        CreatorMedia(
            media_id="creator-media/clip1",
            type="video",
            url="https://res.cloudinary.com/demo/video/upload/v1/creator-media/clip1.mp4",
            thumbnail="https://res.cloudinary.com/demo/video/upload/v1/creator-media/clip1.jpg",
            caption="First clip",
        )
    )
    await db.commit()
    return creator


@pytest_asyncio.fixture
async def predefined_location(db: AsyncSession):
    loc = Location(name="Mumbai", is_predefined=True, is_active=True, created_by="system")
    db.add(loc)
    await db.commit()
    return loc
