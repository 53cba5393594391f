import argparse
import asyncio

from sqlalchemy.future import select

from couponme import seeds
from couponme.core import security
from couponme.db.base import Base
from couponme.db.session import SessionLocal, engine
from couponme.models.user import User, UserRole
from couponme.services.auth import normalize_email


async def create_db() -> None:
    import couponme.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("Tables created")


async def seed_data(demo: bool) -> None:
    async with SessionLocal() as session:
        await seeds.seed(session, demo=demo)
    print("Seed completed" + (" (with demo data)" if demo else ""))


async def create_admin(email: str, password: str, name: str) -> None:
    email = normalize_email(email)
    if len(password) < 8:
        raise SystemExit("Password must be at least 8 characters")
    async with SessionLocal() as session:
        user = (await session.execute(select(User).where(User.email == email))).scalar_one_or_none()
        if user is None:
            user = User(email=email, hashed_password=security.hash_password(password), name=name, role=UserRole.ADMIN)
            session.add(user)
            action = "Created"
        else:
            user.role = UserRole.ADMIN
            user.hashed_password = security.hash_password(password)
            action = "Promoted"
        await session.commit()
    print(f"{action} admin {email}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CouponMe maintenance commands")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("create-db", help="Create all tables on the configured database")

    seed_cmd = subparsers.add_parser("seed", help="Seed default categories")
    seed_cmd.add_argument("--demo", action="store_true", help="Also create demo users and coupons")

    admin = subparsers.add_parser("create-admin", help="Create or promote an administrator account")
    admin.add_argument("--email", required=True, help="Admin email")
    admin.add_argument("--password", required=True, help="Admin password")
    admin.add_argument("--name", default="Administrator", help="Display name")
    return parser


def _run_cli_command(args: argparse.Namespace) -> bool:
    if args.command == "create-db":
        asyncio.run(create_db())
        return True

    if args.command == "seed":
        asyncio.run(seed_data(bool(args.demo)))
        return True

    if args.command == "create-admin":
        asyncio.run(create_admin(args.email, args.password, args.name))
        return True

    return False


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not _run_cli_command(args):
        parser.print_help()


if __name__ == "__main__":
    main()
