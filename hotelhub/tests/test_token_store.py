from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from hotelhub.domain.users.entities import Token, TokenValidationInfo
from hotelhub.domain.users.exceptions import UserError, UserErrorKind


def _token(validation: str, user_id: int, now: datetime) -> Token:
    return Token.new(TokenValidationInfo(validation), user_id, now)


def _live(uow_factory, *validations: str) -> set[str]:
    alive = set()
    with uow_factory() as uow:
        for validation in validations:
            try:
                uow.tokens.find_by_validation(TokenValidationInfo(validation))
            except UserError as exc:
                assert exc.kind is UserErrorKind.NOT_FOUND
            else:
                alive.add(validation)
    return alive


@pytest.mark.parametrize(("created", "max_tokens"), [(1, 3), (3, 3), (5, 3), (4, 1), (6, 10)])
def test_create_keeps_at_most_max_tokens(uow_factory, make_user, clock, created, max_tokens) -> None:
    user_id = make_user()

    for i in range(created):
        with uow_factory() as uow:
            uow.tokens.create(_token(f"tok-{i}", user_id, clock.advance()), max_tokens)

    with uow_factory() as uow:
        assert uow.tokens.count_for_user(user_id) == min(created, max_tokens)


def test_newly_created_token_always_survives(uow_factory, make_user, clock) -> None:
    user_id = make_user()

    for i in range(5):
        with uow_factory() as uow:
            uow.tokens.create(_token(f"tok-{i}", user_id, clock.advance()), 2)
        assert _live(uow_factory, f"tok-{i}") == {f"tok-{i}"}


def test_fourth_token_evicts_least_recently_used(uow_factory, make_user, clock) -> None:
    user_id = make_user()

    for name in ("t1", "t2", "t3", "t4"):
        with uow_factory() as uow:
            uow.tokens.create(_token(name, user_id, clock.advance()), 3)

    assert _live(uow_factory, "t1", "t2", "t3", "t4") == {"t2", "t3", "t4"}


def test_single_session_per_user(uow_factory, make_user, clock) -> None:
    user_id = make_user()

    with uow_factory() as uow:
        uow.tokens.create(_token("t1", user_id, clock.advance()), 1)
    with uow_factory() as uow:
        uow.tokens.create(_token("t2", user_id, clock.advance()), 1)

    assert _live(uow_factory, "t1", "t2") == {"t2"}


def test_eviction_follows_last_use_not_creation(uow_factory, make_user, clock) -> None:
    user_id = make_user()
    with uow_factory() as uow:
        uow.tokens.create(_token("old", user_id, clock.advance()), 2)
        uow.tokens.create(_token("newer", user_id, clock.advance()), 2)
        uow.tokens.update_last_used(TokenValidationInfo("old"), clock.advance())

    with uow_factory() as uow:
        uow.tokens.create(_token("newest", user_id, clock.advance()), 2)

    assert _live(uow_factory, "old", "newer", "newest") == {"old", "newest"}


def test_ties_on_last_use_keep_the_most_recently_inserted(uow_factory, make_user, clock) -> None:
    user_id = make_user()
    same_second = clock.advance()

    for name in ("a", "b", "c"):
        with uow_factory() as uow:
            uow.tokens.create(_token(name, user_id, same_second), 2)

    assert _live(uow_factory, "a", "b", "c") == {"b", "c"}


def test_eviction_is_scoped_to_the_owner(uow_factory, make_user, clock) -> None:
    alice = make_user("alice")
    bob = make_user("bob")

    with uow_factory() as uow:
        uow.tokens.create(_token("bob-1", bob, clock.advance()), 1)
    for i in range(3):
        with uow_factory() as uow:
            uow.tokens.create(_token(f"alice-{i}", alice, clock.advance()), 1)

    assert _live(uow_factory, "bob-1") == {"bob-1"}
    with uow_factory() as uow:
        assert uow.tokens.count_for_user(alice) == 1


@pytest.mark.parametrize("max_tokens", [0, -1])
def test_non_positive_max_tokens_is_rejected(uow_factory, make_user, clock, max_tokens) -> None:
    user_id = make_user()
    with uow_factory() as uow:
        uow.tokens.create(_token("keep", user_id, clock.advance()), 3)

    with pytest.raises(UserError) as exc_info:
        with uow_factory() as uow:
            uow.tokens.create(_token("rejected", user_id, clock.advance()), max_tokens)

    assert exc_info.value.kind is UserErrorKind.INVALID_ARGUMENT
    assert _live(uow_factory, "keep", "rejected") == {"keep"}


def test_update_last_used_never_moves_backwards(uow_factory, make_user, clock) -> None:
    user_id = make_user()
    created = clock.advance()
    with uow_factory() as uow:
        uow.tokens.create(_token("t", user_id, created), 3)

    later = created + timedelta(seconds=30)
    with uow_factory() as uow:
        uow.tokens.update_last_used(TokenValidationInfo("t"), later)
        uow.tokens.update_last_used(TokenValidationInfo("t"), created + timedelta(seconds=10))

    with uow_factory() as uow:
        _, token = uow.tokens.find_by_validation(TokenValidationInfo("t"))
    assert token.last_used_at == later
    assert token.created_at == created


def test_update_last_used_on_missing_token_is_a_no_op(uow_factory, clock) -> None:
    with uow_factory() as uow:
        assert uow.tokens.update_last_used(TokenValidationInfo("ghost"), clock.now()) is None


def test_find_by_validation_returns_owner_and_token(uow_factory, make_user, clock) -> None:
    user_id = make_user("carol")
    now = clock.advance()
    with uow_factory() as uow:
        uow.tokens.create(_token("carol-token", user_id, now), 3)

    with uow_factory() as uow:
        user, token = uow.tokens.find_by_validation(TokenValidationInfo("carol-token"))

    assert user.id == user_id
    assert user.username == "carol"
    assert token.user_id == user_id
    assert token.token_validation_info == TokenValidationInfo("carol-token")
    assert token.created_at == now
    assert token.last_used_at == now


def test_find_by_unknown_validation_is_not_found(uow_factory) -> None:
    with pytest.raises(UserError) as exc_info:
        with uow_factory() as uow:
            uow.tokens.find_by_validation(TokenValidationInfo("never-inserted"))

    assert exc_info.value.kind is UserErrorKind.NOT_FOUND


def test_create_for_unknown_owner_is_not_found(uow_factory, clock) -> None:
    with pytest.raises(UserError) as exc_info:
        with uow_factory() as uow:
            uow.tokens.create(_token("orphan", 999, clock.advance()), 3)

    assert exc_info.value.kind is UserErrorKind.NOT_FOUND
    assert _live(uow_factory, "orphan") == set()


def test_duplicate_validation_info_is_rejected(uow_factory, make_user, clock) -> None:
    user_id = make_user()
    with uow_factory() as uow:
        uow.tokens.create(_token("dup", user_id, clock.advance()), 3)

    with pytest.raises(UserError) as exc_info:
        with uow_factory() as uow:
            uow.tokens.create(_token("dup", user_id, clock.advance()), 3)

    assert exc_info.value.kind is UserErrorKind.ALREADY_EXISTS
    assert exc_info.value.to_dict() == {"error": "already_exists", "context": {"what": "token"}}
    with uow_factory() as uow:
        assert uow.tokens.count_for_user(user_id) == 1


def test_remove_by_validation_is_idempotent(uow_factory, make_user, clock) -> None:
    user_id = make_user()
    with uow_factory() as uow:
        uow.tokens.create(_token("t", user_id, clock.advance()), 3)

    with uow_factory() as uow:
        assert uow.tokens.remove_by_validation(TokenValidationInfo("t")) == 1
    with uow_factory() as uow:
        assert uow.tokens.remove_by_validation(TokenValidationInfo("t")) == 0


def test_eviction_count_is_logged_without_identifiers(
    uow_factory, make_user, clock, recording_logger
) -> None:
    user_id = make_user()
    for name in ("secret-a", "secret-b", "secret-c"):
        with uow_factory() as uow:
            uow.tokens.create(_token(name, user_id, clock.advance()), 3)

    with uow_factory() as uow:
        uow.tokens.create(_token("secret-d", user_id, clock.advance()), 2)

    assert ("info", "2 tokens deleted when creating new token") in recording_logger.messages
    assert "secret-" not in recording_logger.text()


def test_failed_unit_of_work_rolls_back_eviction(uow_factory, make_user, clock) -> None:
    user_id = make_user()
    with uow_factory() as uow:
        uow.tokens.create(_token("t1", user_id, clock.advance()), 1)

    with pytest.raises(RuntimeError):
        with uow_factory() as uow:
            uow.tokens.create(_token("t2", user_id, clock.advance()), 1)
            raise RuntimeError("boom")

    assert _live(uow_factory, "t1", "t2") == {"t1"}
