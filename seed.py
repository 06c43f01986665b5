"""Seed script: fills the database with demo data through the services."""
import os
import sys
from datetime import date, timedelta
from decimal import Decimal

# Ensure we're in the project root
sys.path.insert(0, os.path.dirname(__file__))

from proptrack.database import Base, engine, SessionLocal
import proptrack.models  # noqa: F401
from proptrack.config import settings
from proptrack.models.user import User, UserRole
from proptrack.models.item import ItemCondition
from proptrack.models.assignment import AssignmentStatus
from proptrack.models.maintenance import MaintenanceType, MaintenancePriority
from proptrack.models.disposal import DisposalReason
from proptrack.schemas.user import UserCreate
from proptrack.schemas.location import LocationCreate
from proptrack.schemas.category import CategoryCreate
from proptrack.schemas.item import ItemCreate
from proptrack.schemas.assignment import AssignmentCreate
from proptrack.schemas.item_return import QuickReturn
from proptrack.schemas.service_request import RequestCreate
from proptrack.schemas.maintenance import MaintenanceCreate, MaintenanceComplete
from proptrack.schemas.disposal import DisposalRequest
from proptrack.services import (
    user_service, location_service, category_service, item_service, assignment_service, return_service,
    maintenance_service, disposal_service, request_service,
)


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    admin = user_service.ensure_admin(db, settings.FIRST_ADMIN_USER, settings.FIRST_ADMIN_PASS)
    admin = admin or db.query(User).filter_by(role=UserRole.admin.value).first()
    if db.query(User).count() > 1:
        print("Database already seeded, nothing to do")
        db.close()
        return

    users = {}
    for username, full_name, role in [
        ("mreyes", "Maria Reyes", UserRole.manager),
        ("jcruz", "Juan Cruz", UserRole.user),
        ("asantos", "Ana Santos", UserRole.user),
    ]:
        users[username] = user_service.create_user(db, UserCreate(
            username=username, email=f"{username}@proptrack.example.com", full_name=full_name,
            role=role, password="changeme123",
        ))

    locs = {}
    for code, name, building, floor in [
        ("LOC-SRV", "Server Room", "A", "1"),
        ("LOC-101", "Office 101", "A", "1"),
        ("LOC-201", "Office 201", "A", "2"),
        ("LOC-STO", "IT Storage", "B", "0"),
    ]:
        locs[code] = location_service.create_location(
            db, LocationCreate(code=code, name=name, building=building, floor=floor))

    cats = {}
    for code, name in [("IT", "IT Equipment"), ("FUR", "Furniture")]:
        cats[code] = category_service.create_category(db, CategoryCreate(code=code, name=name))

    items = {}
    for code, name, category, brand, price, loc, condition in [
        ("IT-NB-001", "Laptop Latitude 5440", "IT", "Dell", 65000, "LOC-101", ItemCondition.good),
        ("IT-NB-002", "Laptop ThinkPad T14", "IT", "Lenovo", 62000, "LOC-201", ItemCondition.excellent),
        ("IT-MON-001", "Monitor 24in", "IT", "Samsung", 9500, "LOC-101", ItemCondition.good),
        ("IT-PRN-001", "LaserJet Printer", "IT", "HP", 18000, "LOC-STO", ItemCondition.fair),
        ("FUR-DSK-001", "Office Desk", "FUR", None, 7500, "LOC-201", ItemCondition.good),
        ("FUR-CHR-001", "Office Chair", "FUR", None, 4500, "LOC-201", ItemCondition.poor),
        ("IT-SRV-001", "Rack Server PowerEdge", "IT", "Dell", 240000, "LOC-SRV", ItemCondition.good),
    ]:
        items[code] = item_service.create_item(db, ItemCreate(
            code=code, name=name, category_id=cats[category].id, brand=brand, purchase_price=Decimal(price),
            purchase_date=date(2024, 1, 15), location_id=locs[loc].id, condition=condition,
        ), admin.id if admin else None)

    today = date.today()
    a1 = assignment_service.create_assignment(db, AssignmentCreate(
        item_id=items["IT-NB-001"].id, user_id=users["jcruz"].id, due_date=today + timedelta(days=90),
        purpose="Daily work laptop",
    ), admin.id if admin else None)
    assignment_service.create_assignment(db, AssignmentCreate(
        item_id=items["IT-NB-002"].id, user_id=users["asantos"].id, due_date=today - timedelta(days=3),
        purpose="Field audit",
    ), admin.id if admin else None)
    assignment_service.create_assignment(db, AssignmentCreate(
        item_id=items["IT-MON-001"].id, user_id=users["jcruz"].id, status=AssignmentStatus.pending,
    ), admin.id if admin else None)
    return_service.quick_return(db, a1.id, QuickReturn(condition=ItemCondition.good), admin.id if admin else None)

    maintenance_service.create_maintenance(db, MaintenanceCreate(
        item_id=items["IT-PRN-001"].id, title="Replace fuser unit", maintenance_type=MaintenanceType.corrective,
        priority=MaintenancePriority.high, scheduled_date=today, estimated_cost=Decimal("3500"),
        assigned_to=users["mreyes"].id,
    ), admin.id if admin else None)
    m = maintenance_service.create_maintenance(db, MaintenanceCreate(
        item_id=items["FUR-CHR-001"].id, title="Hydraulic cylinder check",
        maintenance_type=MaintenanceType.preventive, scheduled_date=today,
    ), admin.id if admin else None)
    maintenance_service.complete_maintenance(db, m.id, MaintenanceComplete(
        action_taken="Cylinder worn out", actual_cost=Decimal("800"), condition_after=ItemCondition.damaged,
    ))

    disposal_service.request_disposal(db, items["FUR-CHR-001"].id, DisposalRequest(
        reason=DisposalReason.liquidation, note="Beyond economical repair",
    ), admin.id if admin else None)

    request_service.create_request(db, RequestCreate(
        type="assignment", item_id=items["FUR-DSK-001"].id, title="Standing desk for new hire",
        priority="high",
    ), users["asantos"].id)
    request_service.create_request(db, RequestCreate(
        type="purchase", title="Two spare keyboards", details={"quantity": 2},
    ), users["jcruz"].id)

    db.close()
    print("Seed complete")


if __name__ == "__main__":
    seed()
