"""
Create the superadmin account from the command line. Run from project root:
  python -m pos_auth.scripts.create_superadmin USERNAME EMAIL PASSWORD [--first-name X] [--last-name Y]
"""
import argparse
import asyncio
import sys

from sqlmodel import SQLModel

from config import ApplicationConfig
from pos_auth.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from pos_auth.app.use_cases.auth import RegisterUserCommand, SetupSuperadminUseCase
from pos_auth.depends import AsyncSessionLocal, engine


async def create_superadmin(args) -> int:
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    command = RegisterUserCommand(
        username=args.username.strip(),
        email=args.email,
        password=args.password,
        first_name=args.first_name,
        last_name=args.last_name,
        role="superadmin",
    )
    try:
        async with AsyncSessionLocal() as session:
            result = await SetupSuperadminUseCase(SqlAlchemyUnitOfWork(session)).execute(command)
    finally:
        await engine.dispose()

    if result.is_err():
        print(result.error.message, file=sys.stderr)
        return 1

    print(f"Created superadmin '{result.value.user.username}'.")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Create the POS superadmin account.")
    parser.add_argument("username", help="Username (3-30 chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help="Password")
    parser.add_argument("--first-name", default="Super")
    parser.add_argument("--last-name", default="Admin")
    args = parser.parse_args()

    if not 3 <= len(args.username.strip()) <= 30:
        print("Username must be 3-30 characters.", file=sys.stderr)
        return 1
    if len(args.password) < ApplicationConfig.PASSWORD_MIN_LENGTH:
        print(
            f"Password must be at least {ApplicationConfig.PASSWORD_MIN_LENGTH} characters.",
            file=sys.stderr,
        )
        return 1

    return asyncio.run(create_superadmin(args))


if __name__ == "__main__":
    sys.exit(main())
