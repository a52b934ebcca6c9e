import bcrypt

from pune_events.core import config


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=config.PASSWORD_HASH_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed hash in storage
        return False
