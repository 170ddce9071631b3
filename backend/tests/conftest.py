"""
Pytest fixtures for bazaar backend tests.

Provides an app on the SQL document store (SQLite file in a temp dir) with signed
bearer tokens, a seeded event, and helpers for calling the API.
"""

import pytest
from sqlalchemy import select, update

from bazaar import create_app
from bazaar.docstore import apply_updates
from bazaar.docstore.sql import decode_body, encode_body
from bazaar.extensions import db, documents
from bazaar.models import Document
from bazaar.services import auth_service


ORG_ID = "org1"
EVENT_ID = "evt1"
EVENT_PATH = f"organizations/{ORG_ID}/events/{EVENT_ID}"


def doc_path(collection: str, doc_id: str, org_id: str = ORG_ID, event_id: str = EVENT_ID) -> str:
    return f"organizations/{org_id}/events/{event_id}/{collection}/{doc_id}"


def _user(roles, **extra):
    body = {
        "roles": list(roles),
        "basicInfo": {"chineseName": extra.pop("name", None)},
    }
    body.update(extra)
    return body


SEED_DOCUMENTS = {
    f"organizations/{ORG_ID}": {"name": "Bazaar Org"},
    EVENT_PATH: {
        "name": "Ramadan Bazaar",
        "admins": [
            {"userId": "em1", "phone": "60120000001"},
            {"phone": "60120000002"},
        ],
        "sellerManagers": [
            {"userId": "sm1", "managedDepartments": ["D1", "D2"]},
            {"userId": "sm2", "managedDepartments": ["D3"]},
        ],
    },

    # -- users --
    doc_path("users", "sm1"): _user(
        [],
        name="经理一",
        sellerManager={
            "cashStats": {"pendingFromSellers": 300, "confirmedFromSellers": 0, "cashOnHand": 50},
        },
    ),
    doc_path("users", "sm2"): _user(
        [],
        name="经理二",
        sellerManager={"cashStats": {"pendingFromSellers": 0, "confirmedFromSellers": 0, "cashOnHand": 0}},
    ),
    doc_path("users", "seller1"): _user(["seller"], name="Ali", managedBy=["sm1"]),
    doc_path("users", "seller2"): _user(["seller"], name="Bala", managedBy=["sm2"]),
    doc_path("users", "owner1"): _user(["merchantOwner"], merchantOwner={"merchantId": "m1"}),
    doc_path("users", "owner2"): _user(["merchantOwner"], merchantOwner={"merchantId": "m2"}),
    doc_path("users", "owner_unlinked"): _user(["merchantOwner"]),
    doc_path("users", "asist1"): _user(
        ["merchantAsist"],
        merchantAsist={
            "merchantId": "m1",
            "statistics": {"todayCollected": 40, "todayTransactionCount": 2, "totalCollected": 400},
        },
    ),
    doc_path("users", "asist2"): _user(["merchantAsist"]),
    doc_path("users", "asist3"): _user(["merchantAsist"], merchantAsist={"merchantId": "m2"}),
    doc_path("users", "mm1"): _user(["merchantManager"]),
    doc_path("users", "em1"): _user([]),
    doc_path("users", "phone_60120000002"): _user([]),
    doc_path("users", "ps1"): _user(["pointSeller"]),
    doc_path("users", "cashier1"): _user(["cashier"]),
    doc_path("users", "cust1"): _user(
        ["customer"],
        name="顾客",
        customer={"pointsAccount": {"availablePoints": 100}},
    ),
    # Manager tags on a user document grant nothing
    doc_path("users", "pretender"): _user(["sellerManager", "eventManager", "customer", "superuser"]),

    # -- merchants --
    doc_path("merchants", "m1"): {
        "stallName": "Noodle Stall",
        "merchantOwnerId": "owner1",
        "merchantAsists": ["asist1"],
        "merchantAsistsCount": 1,
        "operationStatus": {"isActive": True},
        "dailyRevenue": {
            "today": 500,
            "todayTransactionCount": 5,
            "todayOwnerCollected": 300,
            "todayAsistsCollected": 200,
        },
    },
    doc_path("merchants", "m2"): {
        "stallName": "Satay Corner",
        "merchantOwnerId": "owner2",
        "merchantAsists": ["a", "b", "c", "d", "asist3"],
        "merchantAsistsCount": 5,
        "operationStatus": {"isActive": False, "pauseReason": "rain"},
        "dailyRevenue": {
            "today": 80,
            "todayTransactionCount": 1,
            "todayOwnerCollected": 80,
            "todayAsistsCollected": 0,
        },
    },

    # -- transactions --
    doc_path("transactions", "t1"): {
        "merchantId": "m1",
        "status": "pending",
        "transactionType": "customer_to_merchant",
        "amount": 20,
        "statusHistory": [{"status": "pending", "updatedBy": "cust1"}],
    },
    doc_path("transactions", "t2"): {
        "merchantId": "m2",
        "status": "pending",
        "transactionType": "customer_to_merchant",
        "amount": 15,
    },
    doc_path("transactions", "t3"): {
        "merchantId": "m1",
        "status": "confirmed",
        "transactionType": "customer_to_merchant",
        "amount": 30,
    },
    doc_path("transactions", "t4"): {
        "merchantId": "m1",
        "status": "pending",
        "transactionType": "point_card_topup",
        "amount": 50,
    },

    # -- cash submissions --
    doc_path("cashSubmissions", "sub1"): {
        "submissionNumber": "CS-0001",
        "submittedBy": "seller1",
        "submitterName": "Ali",
        "submitterRole": "seller",
        "receivedBy": "sm1",
        "amount": 100,
        "status": "pending",
    },
    doc_path("cashSubmissions", "sub2"): {
        "submissionNumber": "CS-0002",
        "submittedBy": "ps1",
        "submitterName": "PointSeller",
        "submitterRole": "pointSeller",
        "receivedBy": "sm1",
        "amount": 50,
        "status": "pending",
    },
    doc_path("cashSubmissions", "sub3"): {
        "submissionNumber": "CS-0003",
        "submittedBy": "seller1",
        "submitterName": "Ali",
        "submitterRole": "seller",
        "receivedBy": "sm1",
        "amount": 70,
        "status": "cancelled",
    },

    # -- point cards --
    doc_path("pointCards", "card1"): {
        "cardNumber": "PC-0001",
        "balance": {"initial": 100, "current": 80, "spent": 20, "reserved": 0},
        "status": {"isActive": True, "isEmpty": False},
        "issuer": {"pointSellerName": "Ps One"},
    },
    doc_path("pointCards", "card2"): {"cardNumber": "PC-0002"},
}


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create application for testing."""
    # A file database, so a second connection can commit while a session transaction is open
    db_file = tmp_path_factory.mktemp("db") / "bazaar.sqlite3"
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'SQLALCHEMY_DATABASE_URI': f'sqlite:///{db_file}',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'DOCUMENT_BACKEND': 'sql',
        'AUTH_BACKEND': 'signed',
        'RESET_BATCH_SIZE': 500,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Empty documents table for each test."""
    db.session.query(Document).delete()
    db.session.commit()
    db.session.expunge_all()

    yield db.session

    db.session.rollback()


@pytest.fixture(scope='function')
def store(db_session):
    return documents.store


@pytest.fixture(scope='function')
def seed(store):
    """Write the standard event fixture."""
    for path, body in SEED_DOCUMENTS.items():
        store.set(path, body)
    return store


def read(path: str) -> dict:
    """Current body of a document (empty dict when missing)."""
    return documents.store.get(path).data


def auth_headers(uid: str, **kwargs) -> dict:
    return {"Authorization": f"Bearer {auth_service.issue_token(uid, **kwargs)}"}


def call(client, name: str, uid: str | None, data: dict, scoped: bool = True):
    """POST a callable with the standard org/event ids merged into data."""
    payload = dict(data)
    if scoped:
        payload.setdefault("organizationId", ORG_ID)
        payload.setdefault("eventId", EVENT_ID)
    headers = auth_headers(uid) if uid else {}
    return client.post(f"/api/callable/{name}", json={"data": payload}, headers=headers)


def commit_elsewhere(writes: dict) -> None:
    """
    Apply {path: dotted updates} on a separate connection and commit.

    Bumps each row's version, the same as another process committing.
    """
    table = Document.__table__
    with db.engine.begin() as conn:
        for path, updates in writes.items():
            row = conn.execute(
                select(table.c.body, table.c.version).where(table.c.path == path)
            ).one()
            conn.execute(
                update(table)
                .where(table.c.path == path)
                .values(body=encode_body(apply_updates(decode_body(row.body), updates)), version=row.version + 1)
            )


@pytest.fixture(scope='function')
def interleave(store, monkeypatch):
    """
    Arm a competing commit that lands right after a transaction first reads a path.

    Usage: interleave(after_read_of, {path: updates, ...}). Fires once.
    """
    def _arm(after_read_of: str, writes: dict) -> None:
        original = store.run_transaction
        pending = [writes]

        def run_transaction(func):
            def _wrapped(txn):
                read = txn.get

                def get(path):
                    snap = read(path)
                    if path == after_read_of and pending:
                        commit_elsewhere(pending.pop())
                    return snap

                txn.get = get
                return func(txn)

            return original(_wrapped)

        monkeypatch.setattr(store, "run_transaction", run_transaction)

    return _arm
