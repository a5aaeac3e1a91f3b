from mesconges import crud, ledger
from mesconges.db import session_scope
from mesconges.models import EmployeeRole

with session_scope() as db:
    admin = crud.add_employee(
        db,
        first_name="Admin",
        last_name="RH",
        email="rh@example.com",
        role=EmployeeRole.HR,
    )
    worker = crud.add_employee(
        db,
        first_name="Test",
        last_name="Salarie",
        email="salarie@example.com",
    )
    ledger.open_balances(
        db,
        worker,
        actor_id=admin.id,
        leave_days=25,
        overtime_hours=0,
    )

    print("admin_id=", admin.id, "employee_id=", worker.id)
