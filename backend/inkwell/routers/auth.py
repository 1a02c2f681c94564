from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends
from fastapi.security import OAuth2PasswordRequestForm, OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..settings import settings
from ..db import get_db
from ..models import User

router = APIRouter(prefix="/auth", tags=["auth"])

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


class Token(BaseModel):
	access_token: str
	token_type: str = "bearer"


class UserOut(BaseModel):
	id: int
	username: str
	email: str

	model_config = {"from_attributes": True}


class RegisterRequest(BaseModel):
	username: str = Field(min_length=3, max_length=128)
	email: str = Field(min_length=3, max_length=256)
	password: str = Field(min_length=1)


def verify_password(plain_password: str, hashed_password: str) -> bool:
	return pwd_context.verify(plain_password, hashed_password)


def authenticate_user(db: Session, username: str, password: str) -> Optional[User]:
	# Accept either the username or the email as the login name
	row = db.query(User).filter((User.username == username) | (User.email == username)).first()
	if row and verify_password(password, row.password_hash):
		return row
	return None


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
	to_encode = data.copy()
	delta = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
	to_encode.update({"exp": datetime.now(timezone.utc) + delta})
	return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


@router.post("/register", status_code=201)
async def register(req: RegisterRequest, db: Session = Depends(get_db)):
	username = req.username.strip()
	email = req.email.strip()
	if not username or not email:
		raise HTTPException(status_code=400, detail="username and email are required")
	existing = db.query(User).filter((User.username == username) | (User.email == email)).first()
	if existing:
		raise HTTPException(status_code=409, detail="user already exists")
	row = User(username=username, email=email, password_hash=pwd_context.hash(req.password))
	try:
		db.add(row)
		db.commit()
	except IntegrityError:
		db.rollback()
		raise HTTPException(status_code=409, detail="user already exists")
	return {"message": "User registered successfully"}


@router.post("/login", response_model=Token)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
	user = authenticate_user(db, form_data.username, form_data.password)
	if not user:
		raise HTTPException(status_code=401, detail="Incorrect username or password")
	return Token(access_token=create_access_token({"sub": str(user.id)}))


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
	credentials_exception = HTTPException(
		status_code=401,
		detail="Could not validate credentials",
		headers={"WWW-Authenticate": "Bearer"},
	)
	try:
		payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
		subject: str | None = payload.get("sub")
		if subject is None:
			raise credentials_exception
		user_id = int(subject)
	except (JWTError, ValueError):
		raise credentials_exception
	user = db.get(User, user_id)
	if user is None:
		raise credentials_exception
	return user


@router.get("/me", response_model=UserOut)
async def me(user: User = Depends(get_current_user)):
	return user
