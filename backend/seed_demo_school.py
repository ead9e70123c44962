from dotenv import load_dotenv

load_dotenv()

from sqlalchemy.orm import Session  # noqa: E402

from backend.field_order_module import init_field_order_module  # noqa: E402
from backend.field_order_module.database import engine  # noqa: E402
from backend.field_order_module.models import CampusScope, CustomFieldDefinition, EntityType, School  # noqa: E402
from backend.field_order_module.security import create_access_token  # noqa: E402

MAIN_SCHOOL_NAME = "Green Valley High"
BRANCH_SCHOOL_NAME = "Green Valley High - North Campus"


def seed_demo_school():
    init_field_order_module()
    db = Session(bind=engine)
    try:
        school = db.query(School).filter(School.name == MAIN_SCHOOL_NAME).first()
        if school:
            print(f"School '{MAIN_SCHOOL_NAME}' already exists with ID: {school.id}")
        else:
            school = School(name=MAIN_SCHOOL_NAME)
            db.add(school)
            db.flush()
            db.add(School(name=BRANCH_SCHOOL_NAME, parent_school_id=school.id))
            db.add(
                CustomFieldDefinition(
                    school_id=school.id,
                    entity_type=EntityType.STUDENT,
                    category_id="personal",
                    category_name="Personal Information",
                    field_key="middle_name",
                    label="Middle Name",
                    type="text",
                    sort_order=20,
                    campus_scope=CampusScope.ALL_CAMPUSES,
                )
            )
            db.commit()
            print(f"School created with ID: {school.id}")

        token = create_access_token(subject="admin@greenvalley.edu", role="school_admin", school_id=school.id)
        print("\nSchool admin bearer token:")
        print(token)
    finally:
        db.close()


if __name__ == "__main__":
    seed_demo_school()
