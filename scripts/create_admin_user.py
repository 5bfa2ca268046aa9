import sys
from infinity_timeline.db.database import SessionLocal
from infinity_timeline.schemas.user import UserCreate
from infinity_timeline.crud.user import create, get_by_email
from infinity_timeline.models.enums import UserRole

db = SessionLocal()


def create_admin(email, full_name, password):
    # Check if user already exists
    user = get_by_email(db, email=email)
    if user:
        print(f"User with email {email} already exists")
        return

    user_in = UserCreate(
        email=email,
        full_name=full_name,
        password=password,
        role=UserRole.ADMIN,
        is_active=True,
    )
    user = create(db=db, obj_in=user_in)
    print(f"Admin user created: {user.email} (ID: {user.id})")
    return user


if __name__ == "__main__":
    if len(sys.argv) != 4:
        print("Usage: python create_admin_user.py <email> <full_name> <password>")
        sys.exit(1)

    email = sys.argv[1]
    full_name = sys.argv[2]
    password = sys.argv[3]

    create_admin(email, full_name, password)
