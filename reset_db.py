from app import create_app
from models import db
from seed_catalog import seed_sample_catalog

if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        print("Dropping all tables...")
        db.drop_all()
        print("Creating all tables...")
        db.create_all()
        seed_sample_catalog()
        print("Database schema updated successfully!")
