from __future__ import annotations

import os
import sys
from collections.abc import Callable, Iterator
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal
from io import BytesIO
from itertools import count
from pathlib import Path

import pytest
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("ENABLE_TRACING", "false")

from branch_reports.api.deps import get_db_session
from branch_reports.core.config import get_settings
from branch_reports.main import app
from branch_reports.models import Base, Branch, Profile, Transaction, TransactionStatus, TransferMethod

AUTH_USER_ID = "7d6f0b7e-1c1e-4d4f-9a52-3b1c0f6e2a10"


class InMemoryS3Client:
    """Simple in-memory S3 stub used in place of boto3 during tests."""

    def __init__(self) -> None:
        self._buckets: dict[str, dict[str, bytes]] = {}
        self.content_types: dict[str, str | None] = {}
        self.put_calls: list[str] = []
        self.fail_uploads = False

    def head_bucket(self, *, Bucket: str) -> None:
        if Bucket not in self._buckets:
            raise ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, "HeadBucket")

    def create_bucket(self, *, Bucket: str, **_: object) -> None:
        self._buckets.setdefault(Bucket, {})

    def get_object(self, *, Bucket: str, Key: str) -> dict[str, BytesIO]:
        bucket = self._buckets.get(Bucket)
        if bucket is None or Key not in bucket:
            raise ClientError({"Error": {"Code": "NoSuchKey"}}, "GetObject")
        return {"Body": BytesIO(bucket[Key])}

    def put_object(
        self,
        *,
        Bucket: str,
        Key: str,
        Body: bytes,
        ContentType: str | None = None,
        **_: object,
    ) -> dict[str, str]:
        if self.fail_uploads:
            raise ClientError(
                {"Error": {"Code": "QuotaExceeded", "Message": "Storage quota exceeded"}}, "PutObject"
            )
        if Bucket not in self._buckets:
            raise ClientError({"Error": {"Code": "NoSuchBucket"}}, "PutObject")
        self._buckets[Bucket][Key] = Body
        self.content_types[Key] = ContentType
        self.put_calls.append(Key)
        return {"ETag": "in-memory"}

    def generate_presigned_url(
        self,
        ClientMethod: str,
        Params: dict[str, str] | None = None,
        ExpiresIn: int = 3600,
        **_: object,
    ) -> str:
        params = Params or {}
        return f"https://s3.test/{params['Bucket']}/{params['Key']}?X-Amz-Expires={ExpiresIn}"

    @property
    def buckets(self) -> dict[str, dict[str, bytes]]:
        return self._buckets


DATABASE_URL = "sqlite+pysqlite://"

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture(autouse=True)
def s3_client(monkeypatch: pytest.MonkeyPatch) -> Iterator[InMemoryS3Client]:
    client = InMemoryS3Client()

    def _client_factory(*args: object, **kwargs: object) -> InMemoryS3Client:
        return client

    monkeypatch.setattr("branch_reports.services.storage.boto3.client", _client_factory)
    yield client


@pytest.fixture()
def db_session() -> Iterator[Session]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture()
def branches(db_session: Session) -> dict[str, Branch]:
    created = {
        "kabul": Branch(name="Kabul Branch"),
        "herat": Branch(name="Herat Branch"),
        "mazar": Branch(name="Mazar-i-Sharif"),
    }
    db_session.add_all(created.values())
    db_session.commit()
    return created


@pytest.fixture()
def staff(db_session: Session, branches: dict[str, Branch]) -> dict[str, Profile]:
    created = {
        "admin": Profile(
            auth_user_id=AUTH_USER_ID,
            full_name="Farida Ahmadi",
            branch_id=branches["kabul"].id,
        ),
        "cashier": Profile(full_name="Omid Rahimi", branch_id=branches["herat"].id),
    }
    db_session.add_all(created.values())
    db_session.commit()
    return created


@pytest.fixture()
def make_transaction(db_session: Session) -> Callable[..., Transaction]:
    sequence = count(1)

    def _make(
        *,
        from_branch_id: str | None,
        to_branch_id: str | None,
        amount: Decimal | str | int = Decimal("1000"),
        transaction_date: date = date(2025, 3, 10),
        currency: str = "AFN",
        status: TransactionStatus = TransactionStatus.CONFIRMED,
        transfer_method: TransferMethod = TransferMethod.HAWALA,
        from_staff_id: str | None = None,
        to_staff_id: str | None = None,
        transaction_number: str | None = None,
    ) -> Transaction:
        number = transaction_number or f"TX-{next(sequence):06d}"
        transaction = Transaction(
            transaction_number=number,
            from_branch_id=from_branch_id,
            to_branch_id=to_branch_id,
            from_staff_id=from_staff_id,
            to_staff_id=to_staff_id,
            amount=Decimal(str(amount)),
            currency=currency,
            transfer_method=transfer_method,
            transaction_date=transaction_date,
            status=status,
        )
        db_session.add(transaction)
        db_session.commit()
        return transaction

    return _make


@pytest.fixture()
def client(db_session: Session) -> Iterator[TestClient]:
    def override_get_db() -> Iterator[Session]:
        try:
            yield db_session
        finally:
            db_session.rollback()

    app.dependency_overrides[get_db_session] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.pop(get_db_session, None)


def issue_token(subject: str = AUTH_USER_ID, **claims: object) -> str:
    settings = get_settings()
    now = datetime.now(UTC)
    payload = {
        "sub": subject,
        "email": "admin@school.example",
        "role": "authenticated",
        "aud": settings.identity_jwt_audience,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(hours=1)).timestamp()),
        **claims,
    }
    return jwt.encode(payload, settings.identity_jwt_secret, algorithm=settings.identity_jwt_algorithm)


@pytest.fixture()
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_token()}"}
