import os

from database import SessionLocal, init_db
from models.users import User
from models.category import SuperCategory, Category
from models.product import Product
from models.customer import Customer
from models.shipment import Shipment
from models.draft import ShipmentDraftRecord
from utils.hashing import get_password_hash

# Configuration
ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin123")

CATALOG = {
    "Electronics": {
        "Accessories": [("PROD001", "Sample Product 1", "India")],
    },
    "Apparel": {
        "Clothing": [("PROD002", "Sample Product 2", "India")],
    },
}

CUSTOMERS = [
    {"code": "CUST001", "name": "Acme Traders", "group": "Retail", "city": "Mumbai",
     "state": "Maharashtra", "region": "West", "state_code": "MH"},
    {"code": "CUST002", "name": "Northwind Imports", "group": "Wholesale", "city": "Delhi",
     "state": "Delhi", "region": "North", "state_code": "DL"},
]
# End Configuration


def seed_admin(session) -> User:
    admin = session.query(User).filter(User.email == ADMIN_EMAIL).first()
    if admin:
        return admin
    admin = User(
        email=ADMIN_EMAIL,
        password_hash=get_password_hash(ADMIN_PASSWORD),
        role="ADMIN",
        name="Admin User",
    )
    session.add(admin)
    session.flush()
    print(f"Created admin user: {admin.email}")
    return admin


def seed_catalog(session, admin: User) -> int:
    created = 0
    for super_name, categories in CATALOG.items():
        sc = SuperCategory(name=super_name)
        session.add(sc)
        session.flush()
        for category_name, products in categories.items():
            cat = Category(name=category_name, super_category_id=sc.id)
            session.add(cat)
            session.flush()
            for sku, name, origin in products:
                session.add(Product(
                    sku=sku, product_name=name, origin=origin,
                    category_id=cat.id, is_active=True, created_by=admin.id,
                ))
                created += 1
    return created


def populate_database():
    """Reset catalog, customer and shipment data and load the sample set. Users are preserved."""
    init_db()
    session = SessionLocal()
    try:
        session.query(ShipmentDraftRecord).delete()
        session.query(Shipment).delete()
        session.query(Product).delete()
        session.query(Category).delete()
        session.query(SuperCategory).delete()
        session.query(Customer).delete()
        print("Cleared existing data")

        admin = seed_admin(session)
        products = seed_catalog(session, admin)
        for data in CUSTOMERS:
            session.add(Customer(**data, created_by=admin.id))
        session.commit()

        print(f"Created {products} sample products and {len(CUSTOMERS)} customers")
        print(f"Admin credentials: {ADMIN_EMAIL} / {ADMIN_PASSWORD}")
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


if __name__ == "__main__":
    populate_database()
