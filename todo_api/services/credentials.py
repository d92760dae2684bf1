import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from todo_api.models.user import User
from todo_api.utils.auth import hash_password, verify_password, dummy_verify

logger = logging.getLogger(__name__)


class UserAlreadyExists(Exception):
    pass


class InvalidCredentials(Exception):
    pass


class PasswordHashingError(Exception):
    pass


def get_user_by_username(db: Session, username: str):
    return db.query(User).filter(User.username == username).first()


def register(db: Session, username: str, password: str) -> User:
    if get_user_by_username(db, username) is not None:
        raise UserAlreadyExists(username)

    try:
        hashed = hash_password(password)
    except ValueError as exc:
        raise PasswordHashingError(str(exc)) from exc

    user = User(username=username, password=hashed)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # lost a race against a concurrent registration of the same name
        db.rollback()
        raise UserAlreadyExists(username) from exc
    db.refresh(user)
    logger.info("Registered user %s (id=%s)", user.username, user.id)
    return user


def verify_login(db: Session, username: str, password: str) -> User:
    user = get_user_by_username(db, username)
    if user is None:
        dummy_verify()
        raise InvalidCredentials(username)
    if not verify_password(password, user.password):
        raise InvalidCredentials(username)
    return user
