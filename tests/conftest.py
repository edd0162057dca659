"""Shared fixtures: in-memory SQLite, a recording mail sink, and seed helpers."""

import os

# Keep tests off any real database or mail account
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"
os.environ["BREVO_API_KEY"] = ""
os.environ["ADMIN_EMAILS"] = "[]"

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

import bookstore.models  # noqa: F401
from bookstore.database import get_session
from bookstore.main import app
from bookstore.models.book import Book
from bookstore.models.cart import Cart, CartItem
from bookstore.models.promotion import Promotion
from bookstore.models.user import User
from bookstore.services.email_service import get_mailer
from bookstore.utils.token import create_access_token


class RecordingMailer:
    """Stands in for the Brevo sink; remembers every send attempt."""

    def __init__(self):
        self.calls = []
        self.fail = False

    def __call__(self, to, subject, html):
        self.calls.append({"to": to, "subject": subject, "html": html})
        if self.fail:
            raise RuntimeError("mail server unavailable")
        return True


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def client(session, mailer):
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_mailer] = lambda: mailer

    yield TestClient(app)

    app.dependency_overrides.clear()


# -- Seed helpers --------------------------------------------------------------

@pytest.fixture
def make_user(session):
    def _make(first_name="Ada", email=None, role="user", can_login=True):
        user = User(
            first_name=first_name,
            last_name="Reader",
            username=first_name.lower(),
            email=email or f"{first_name.lower()}@example.com",
            role=role,
            can_login=can_login,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
    return _make


@pytest.fixture
def make_book(session):
    def _make(title="Dune", price=20.00, **fields):
        book = Book(title=title, price=price, **fields)
        session.add(book)
        session.commit()
        session.refresh(book)
        return book
    return _make


@pytest.fixture
def make_cart(session):
    def _make(user, lines=()):
        cart = Cart(user_id=user.id)
        session.add(cart)
        session.commit()
        session.refresh(cart)
        for book, quantity in lines:
            session.add(CartItem(cart_id=cart.id, book_id=book.id, quantity=quantity))
        session.commit()
        session.refresh(cart)
        return cart
    return _make


@pytest.fixture
def make_promotion(session):
    def _make(
        title="SPRING20",
        discount=0.20,
        start_date=datetime(2026, 3, 1),
        end_date=datetime(2026, 3, 31, 23, 59, 59),
        is_sent=False,
    ):
        promotion = Promotion(
            title=title,
            discount=discount,
            start_date=start_date,
            end_date=end_date,
            is_sent=is_sent,
        )
        session.add(promotion)
        session.commit()
        session.refresh(promotion)
        return promotion
    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token({"user_id": user.id})
        return {"Authorization": f"Bearer {token}"}
    return _headers
