"""Tests for RoleResolver (root allow-list, store ownership, preference handling)."""

from quickorder.application.services.role_resolver import RoleResolver
from quickorder.domain.entities import IdentityClaims
from quickorder.domain.enums import Role
from quickorder.infrastructure.firebase.repositories import FirestoreStoreRepository
from tests.helpers import seed_store


def _resolver(db) -> RoleResolver:
    return RoleResolver(
        FirestoreStoreRepository(db),
        root_emails=["Root@QuickOrder.test"],
        root_phones=["+91 90000 00001"],
    )


def test_is_root_matches_email_case_insensitively_and_phone_by_national_number(db) -> None:
    resolver = _resolver(db)
    assert resolver.is_root("root@quickorder.test", None)
    assert resolver.is_root(None, "9000000001")
    assert resolver.is_root(None, "+919000000001")
    assert not resolver.is_root("someone@else.test", "9812345678")
    assert not resolver.is_root(None, None)


async def test_customer_preference_never_elevates(db) -> None:
    await seed_store(db, "Acme", owner_email="asha@acme.test")
    resolver = _resolver(db)
    user = await resolver.resolve(
        IdentityClaims(uid="u1", email="root@quickorder.test"), Role.CUSTOMER
    )
    assert user.role is Role.CUSTOMER
    seller = await resolver.resolve(IdentityClaims(uid="u2", email="asha@acme.test"), None)
    assert seller.role is Role.CUSTOMER


async def test_elevated_preference_resolves_root(db) -> None:
    user = await _resolver(db).resolve(
        IdentityClaims(uid="u1", display_name="Root", email="ROOT@quickorder.test"), Role.ROOT
    )
    assert user.role is Role.ROOT
    assert user.name == "Root"


async def test_elevated_preference_resolves_seller_with_all_matched_stores(db) -> None:
    await seed_store(db, "Acme", owner_email="asha@acme.test")
    await seed_store(db, "Bolt", owner_phone="+919812345678")
    await seed_store(db, "Other", owner_email="other@x.test")
    user = await _resolver(db).resolve(
        IdentityClaims(uid="u2", email="asha@acme.test", phone_number="9812345678"),
        Role.SELLER,
    )
    assert user.role is Role.SELLER
    assert user.managed_store_ids == ("Acme", "Bolt")


async def test_elevated_preference_without_ownership_is_customer(db) -> None:
    user = await _resolver(db).resolve(IdentityClaims(uid="u3", email="nobody@x.test"), Role.ROOT)
    assert user.role is Role.CUSTOMER
    assert user.managed_store_ids == ()


async def test_authorize_store_rechecks_current_ownership(db) -> None:
    await seed_store(db, "Acme", owner_email="asha@acme.test")
    resolver = _resolver(db)
    seller = await resolver.resolve(IdentityClaims(uid="u2", email="asha@acme.test"), Role.SELLER)
    assert await resolver.authorize_store(seller, "Acme")
    assert not await resolver.authorize_store(seller, "Bolt")
    await FirestoreStoreRepository(db).update_settings("Acme", {"owner_email": "new@acme.test"})
    assert not await resolver.authorize_store(seller, "Acme")


async def test_authorize_store_rejects_demoted_user(db) -> None:
    await seed_store(db, "Acme", owner_email="asha@acme.test")
    resolver = _resolver(db)
    seller = await resolver.resolve(IdentityClaims(uid="u2", email="asha@acme.test"), Role.SELLER)
    assert not await resolver.authorize_store(seller.demoted(), "Acme")
    assert not await resolver.authorize_store(None, "Acme")


async def test_authorize_root(db) -> None:
    resolver = _resolver(db)
    root = await resolver.resolve(IdentityClaims(uid="u1", email="root@quickorder.test"), Role.ROOT)
    assert resolver.authorize_root(root)
    assert not resolver.authorize_root(root.demoted())
    assert not resolver.authorize_root(None)
