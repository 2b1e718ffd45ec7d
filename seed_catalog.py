from catalog import services as catalog
from catalog.projections import normalize_imported
from models.service_entry import ServiceEntry

# Starting data, in the same flat schema the export produces
SAMPLE_CATALOG = {
    "check_balance": {
        "service_name": "Check Airtime Balance",
        "mtn": {"code": "*124#", "explanation": "Checks your main airtime balance on MTN."},
        "telecel": {"code": "*124#", "explanation": "Checks your main airtime balance on Telecel."},
        "airteltigo": {"code": "*134#", "explanation": "Checks your main airtime balance on AirtelTigo."},
        "glo": {"code": "*124#", "explanation": "Checks your main airtime balance on Glo."},
    },
    "borrow_credit": {
        "service_name": "Borrow Credit / Airtime",
        "mtn": {"code": "*155#", "explanation": "Lends you airtime to be paid back on your next recharge."},
        "telecel": {"code": "*505#", "explanation": "Telecel's 'SOS Credit' service."},
        "airteltigo": {"code": "*130#", "explanation": "AirtelTigo's 'SOS Credit' service."},
        "glo": {"code": "*305#", "explanation": "Glo's 'Borrow Me Credit' service."},
    },
}

def seed_sample_catalog(force=False):
    """Load SAMPLE_CATALOG when the catalog is empty (or always, with force)."""
    if not force and ServiceEntry.query.first():
        return 0
    return catalog.replace_catalog(normalize_imported(SAMPLE_CATALOG))

if __name__ == "__main__":
    from app import create_app
    from models import db

    app = create_app()
    with app.app_context():
        db.create_all()
        count = seed_sample_catalog(force=True)
        print(f"✅ Seeded {count} services")
