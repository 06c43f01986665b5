from sqlalchemy.orm import Session
from sqlalchemy import select
from fastapi import HTTPException
from passlib.context import CryptContext
from proptrack.models.user import User, UserRole
from proptrack.schemas.user import UserCreate, UserUpdate
from proptrack.schemas.pagination import Page, paginate

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def get_users(db: Session, page: int = 1, size: int = 50, role: str | None = None) -> Page:
    query = select(User)
    if role:
        query = query.where(User.role == role)
    query = query.order_by(User.username)
    return paginate(db, query, page, size)


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.scalar(select(User).where(User.username == username))


def create_user(db: Session, data: UserCreate) -> User:
    if get_user_by_username(db, data.username):
        raise HTTPException(status_code=409, detail="Username already exists")
    if db.scalar(select(User).where(User.email == data.email)):
        raise HTTPException(status_code=409, detail="Email already exists")
    user = User(
        username=data.username,
        email=data.email,
        full_name=data.full_name,
        hashed_password=hash_password(data.password),
        role=UserRole(data.role).value,
        is_active=data.is_active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update_user(db: Session, user_id: int, data: UserUpdate) -> User:
    user = get_user(db, user_id)
    update_data = data.model_dump(exclude_unset=True)
    if "password" in update_data:
        update_data["hashed_password"] = hash_password(update_data.pop("password"))
    if update_data.get("role") is not None:
        update_data["role"] = UserRole(update_data["role"]).value
    for field, value in update_data.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    return user


def ensure_admin(db: Session, username: str, password: str) -> User | None:
    """Create the first admin account when the users table is empty."""
    if db.scalar(select(User.id).limit(1)):
        return None
    admin = User(
        username=username,
        email=f"{username}@proptrack.example.com",
        hashed_password=hash_password(password),
        role=UserRole.admin.value,
        is_active=True,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin
