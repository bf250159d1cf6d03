"""
Lock engine: lock and unlock profiles inside a Document.

These functions only transform the Document they are given; reading and
writing the credentials file is left to the caller.
"""

from .errors import ProfileNotFound


def lock_all(document):
    """
    Lock every entry of every profile. Preamble entries are left alone.

    Returns:
        int: number of entries that were locked
    """
    return sum(document.set_locked(name, True) for name in document.profile_names())


def lock_one(document, profile):
    """
    Lock all entries of one profile.

    Returns:
        int: number of entries that were locked (0 if already locked or empty)

    Raises:
        ProfileNotFound: If the document has no section named ``profile``
    """
    if document.find_section(profile) is None:
        raise ProfileNotFound(profile)
    return document.set_locked(profile, True)


def unlock_one(document, profile):
    """
    Unlock all entries of one profile.

    Returns:
        int: number of entries that were unlocked (0 if already unlocked or empty)

    Raises:
        ProfileNotFound: If the document has no section named ``profile``
    """
    if document.find_section(profile) is None:
        raise ProfileNotFound(profile)
    return document.set_locked(profile, False)


def _require_profiles(document, profiles):
    missing = [name for name in profiles if document.find_section(name) is None]
    if missing:
        raise ProfileNotFound(*missing)


def lock_profiles(document, profiles):
    """
    Lock several profiles. Nothing is changed unless every profile exists.

    Returns:
        int: total number of entries that were locked

    Raises:
        ProfileNotFound: Naming every missing profile
    """
    _require_profiles(document, profiles)
    return sum(document.set_locked(name, True) for name in profiles)


def unlock_profiles(document, profiles):
    """
    Unlock several profiles. Nothing is changed unless every profile exists.

    Returns:
        int: total number of entries that were unlocked

    Raises:
        ProfileNotFound: Naming every missing profile
    """
    _require_profiles(document, profiles)
    return sum(document.set_locked(name, False) for name in profiles)
