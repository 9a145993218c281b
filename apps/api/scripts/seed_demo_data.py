"""
Seed script for local development: vocabularies, clinics, cases, files,
follow-ups and feed posts.

Run with: python -m scripts.seed_demo_data

Creates tables that do not exist yet (use alembic in real deployments).
Set SEED_ZONE_TABLE=false to leave the optional zone lookup table out and
exercise the fallback query path.
"""

import os
import random
from datetime import datetime, timedelta, timezone

from oncoshare.db.base import Base
from oncoshare.db.enums import CaseStatus, FeedStatus, FileKind, Outcome, Sex
from oncoshare.db.models import (
    AnatomicalSite,
    Case,
    CaseFile,
    Clinic,
    FeedPost,
    FollowUp,
    TumourType,
)
from oncoshare.db.models.geo import ensure_zone_table
from oncoshare.db.session import SessionLocal, engine
from oncoshare.domain.case_numbers import next_case_number

TUMOUR_TYPES = [
    ("Lymphoma", None),
    ("Mast Cell Tumour", None),
    ("Osteosarcoma", "Canine"),
    ("Hemangiosarcoma", "Canine"),
    ("Soft Tissue Sarcoma", None),
    ("Melanoma", None),
    ("Squamous Cell Carcinoma", None),
    ("Mammary Carcinoma", None),
    ("Transitional Cell Carcinoma", None),
    ("Histiocytic Sarcoma", "Canine"),
]

ANATOMICAL_SITES = [
    "Skin", "Subcutis", "Oral Cavity", "Limbs", "Mammary Gland",
    "Spleen", "Liver", "Bladder", "Lymph Node", "Bone",
]

# State spellings vary on purpose: names, codes, enum style, aliases.
CLINICS = [
    ("Lekki Animal Hospital", "Lagos", "Lekki"),
    ("Kano Veterinary Clinic", "KANO", "Kano"),
    ("Garden City Vets", "rivers", "Port Harcourt"),
    ("Capital Pet Care", "Abuja", "Garki"),
    ("Uyo Companion Animal Centre", "AKWA_IBOM", "Uyo"),
    ("Enugu Small Animal Practice", "Enugu", "Enugu"),
]

SPECIES_BREEDS = {
    "Canine": ["Boerboel", "German Shepherd", "Rottweiler", "Mixed"],
    "Feline": ["Domestic Shorthair", "Persian", "Siamese"],
}

CUSTOM_TUMOURS = ["Transmissible Venereal Tumour", "Perianal Adenoma"]


def seed_vocabularies(db) -> tuple[list[TumourType], list[AnatomicalSite]]:
    if db.query(TumourType).filter(TumourType.is_system.is_(True)).first():
        return (
            db.query(TumourType).filter(TumourType.is_system.is_(True)).all(),
            db.query(AnatomicalSite).filter(AnatomicalSite.is_system.is_(True)).all(),
        )
    tumour_types = [
        TumourType(name=name, species=species, is_system=True) for name, species in TUMOUR_TYPES
    ]
    sites = [AnatomicalSite(name=name, is_system=True) for name in ANATOMICAL_SITES]
    db.add_all(tumour_types + sites)
    db.flush()
    print(f"Seeded {len(tumour_types)} tumour types and {len(sites)} anatomical sites")
    return tumour_types, sites


def create_cases(db, clinics, tumour_types, sites, count: int) -> list[Case]:
    print(f"Creating {count} cases...")
    now = datetime.now(timezone.utc)
    cases: list[Case] = []
    for _ in range(count):
        clinic = random.choice(clinics)
        species = random.choice(list(SPECIES_BREEDS))
        diagnosed = now - timedelta(days=random.randint(0, 365))
        case = Case(
            case_number=next_case_number(db, diagnosed.year),
            clinic_id=clinic.id,
            state=clinic.state,
            species=species,
            breed=random.choice(SPECIES_BREEDS[species]),
            sex=random.choice(list(Sex)).value,
            diagnosis_date=diagnosed,
            outcome=random.choice([None, *[o.value for o in Outcome]]),
            status=random.choice([CaseStatus.ACTIVE, CaseStatus.COMPLETED]).value,
        )
        if random.random() < 0.15:
            case.tumour_type_custom = random.choice(CUSTOM_TUMOURS)
        else:
            case.tumour_type_id = random.choice(tumour_types).id
        if random.random() < 0.8:
            case.anatomical_site_id = random.choice(sites).id
        db.add(case)
        # Autoflush is off; next_case_number must see this row.
        db.flush()
        cases.append(case)
    return cases


def create_files_and_follow_ups(db, cases: list[Case]) -> None:
    now = datetime.now(timezone.utc)
    for case in cases:
        for index in range(random.randint(0, 3)):
            is_image = random.random() < 0.6
            db.add(
                CaseFile(
                    case_id=case.id,
                    kind=(FileKind.IMAGE if is_image else FileKind.FILE).value,
                    filename=f"{case.case_number}-{index}.{'jpg' if is_image else 'pdf'}",
                    storage_key=f"cases/{case.id}/{index}.{'jpg' if is_image else 'pdf'}",
                    mime_type="image/jpeg" if is_image else "application/pdf",
                    size=random.randint(20_000, 2_000_000),
                    created_at=now - timedelta(days=random.randint(0, 60)),
                    deleted_at=now if random.random() < 0.1 else None,
                )
            )
        if random.random() < 0.5:
            db.add(
                FollowUp(
                    case_id=case.id,
                    title="Recheck",
                    scheduled_for=now + timedelta(days=random.randint(-10, 45)),
                    is_completed=random.random() < 0.3,
                )
            )


def create_feed_posts(db, clinics: list[Clinic], count: int) -> None:
    now = datetime.now(timezone.utc)
    for index in range(count):
        clinic = random.choice([None, *clinics])
        created = now - timedelta(hours=index * 7)
        status = FeedStatus.PUBLISHED if random.random() < 0.85 else FeedStatus.DRAFT
        db.add(
            FeedPost(
                title=f"Update #{index + 1}",
                body="Case conference notes and protocol reminders.",
                status=status.value,
                clinic_id=clinic.id if clinic else None,
                author_name=clinic.name if clinic else "Oncoshare team",
                published_at=created if status == FeedStatus.PUBLISHED else None,
                created_at=created,
            )
        )


def main():
    random.seed(int(os.getenv("SEED_RANDOM", "7")))
    Base.metadata.create_all(bind=engine)
    if os.getenv("SEED_ZONE_TABLE", "true").lower() != "false":
        with engine.begin() as connection:
            ensure_zone_table(connection)

    db = SessionLocal()
    try:
        tumour_types, sites = seed_vocabularies(db)
        clinics = [Clinic(name=name, state=state, city=city) for name, state, city in CLINICS]
        db.add_all(clinics)
        db.flush()

        case_count = int(os.getenv("SEED_CASES", "120"))
        post_count = int(os.getenv("SEED_FEED_POSTS", "30"))
        cases = create_cases(db, clinics, tumour_types, sites, case_count)
        create_files_and_follow_ups(db, cases)
        create_feed_posts(db, clinics, post_count)
        db.commit()

        print("\nDemo data seeded successfully!")
        print(f"  - {len(clinics)} clinics created")
        print(f"  - {case_count} cases created")
        print(f"  - {post_count} feed posts created")
    except Exception as e:
        print(f"ERROR: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
