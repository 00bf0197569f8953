"""
Shared fixtures for the MultiSign SDK test suite
"""

from datetime import datetime, timezone

import pytest

from multisign_sdk import (
    AuthenticatedUser,
    Document,
    DocumentContent,
    DocumentService,
    DocumentStatus,
    Identity,
    InMemoryDocumentStore,
    LocalAccountSigner,
    RequiredSigner,
    StaticIdentityProvider,
    TextContent,
    hash_content,
)

ALICE_KEY = '0x' + '11' * 32
BOB_KEY = '0x' + '22' * 32
CAROL_KEY = '0x' + '33' * 32


@pytest.fixture
def alice_signer():
    return LocalAccountSigner(ALICE_KEY)


@pytest.fixture
def bob_signer():
    return LocalAccountSigner(BOB_KEY)


@pytest.fixture
def carol_signer():
    return LocalAccountSigner(CAROL_KEY)


@pytest.fixture
def alice_user():
    return AuthenticatedUser(subject_id='sub-alice', username='alice', email='alice@example.com')


@pytest.fixture
def bob_user():
    return AuthenticatedUser(subject_id='sub-bob', username='bob', email='Bob@Example.com')


@pytest.fixture
def carol_user():
    return AuthenticatedUser(subject_id='sub-carol', username='carol', email=None)


@pytest.fixture
def alice(alice_user, alice_signer):
    return Identity(
        subject_id=alice_user.subject_id,
        display_name=alice_user.username,
        email=alice_user.email,
        wallet_address=alice_signer.address
    )


@pytest.fixture
def bob(bob_user, bob_signer):
    return Identity(
        subject_id=bob_user.subject_id,
        display_name=bob_user.username,
        email=bob_user.email,
        wallet_address=bob_signer.address
    )


@pytest.fixture
def carol(carol_user, carol_signer):
    return Identity(
        subject_id=carol_user.subject_id,
        display_name=carol_user.username,
        email=None,
        wallet_address=carol_signer.address
    )


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def make_service(store):
    """Factory building a service bound to one party, sharing the fixture store by default"""

    def factory(user, signer, document_store=None, **kwargs):
        return DocumentService(
            StaticIdentityProvider(user),
            signer,
            document_store if document_store is not None else store,
            **kwargs
        )

    return factory


@pytest.fixture
def make_document(alice):
    """Factory building an unsigned text document created by alice"""

    def factory(text='hello', signers=('sub-alice', 'sub-bob'), created_by=None):
        data = TextContent(text)
        created = datetime(2025, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
        return Document(
            id='doc_1735787045678_abc123def',
            content=DocumentContent(data=data, hash=hash_content(data)),
            created_by=created_by or alice,
            created_at=created,
            updated_at=created,
            status=DocumentStatus.PENDING,
            required_signers=[RequiredSigner(identifier=s) for s in signers],
            signatures=[]
        )

    return factory
