from nexus.nexus_auth.utils import create_user, update_user
import asyncio
import sys


async def run_command():
    method = sys.argv[1] if len(sys.argv) > 1 else None
    methods = {
        "create_user": create,
        "update_password": update_password,
    }
    if method not in methods:
        print(f"Unknown method: {method}. Available methods: {', '.join(methods.keys())}")
        return

    await methods[method](*sys.argv[2:])


async def create(username: str, password: str, role: str = "Student", name: str | None = None):
    await create_user(username, password, role, name)
    print(f"User {username} ({role}) created successfully")


async def update_password(username: str, password: str):
    public_id = await update_user(username, password)
    if public_id is None:
        print(f"User {username} not found")
        return
    print(f"Password of {username} updated successfully")


if __name__ == "__main__":
    asyncio.run(run_command())
