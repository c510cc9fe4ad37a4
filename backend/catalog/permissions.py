from django.contrib.auth.models import AbstractBaseUser

from catalog.exceptions import AuthorizationError


def can_run_import(user: AbstractBaseUser) -> bool:
    if not user.is_authenticated:
        return False
    return user.has_perm("catalog.run_catalog_import")


def can_repair_data(user: AbstractBaseUser) -> bool:
    if not user.is_authenticated:
        return False
    return user.has_perm("catalog.repair_catalog_data")


def can_merge_artists(user: AbstractBaseUser) -> bool:
    if not user.is_authenticated:
        return False
    return user.has_perm("catalog.merge_artists")


def assert_can_run_import(user: AbstractBaseUser) -> None:
    if not can_run_import(user):
        raise AuthorizationError("You do not have permission to run catalog imports.")


def assert_can_repair_data(user: AbstractBaseUser) -> None:
    if not can_repair_data(user):
        raise AuthorizationError("You do not have permission to repair catalog data.")


def assert_can_merge_artists(user: AbstractBaseUser) -> None:
    if not can_merge_artists(user):
        raise AuthorizationError("You do not have permission to merge artists.")
