import logging
from typing import List

from fastapi import APIRouter, HTTPException
from app.core.database import get_db
from app.models.common import Employee, EmployeeCreate

router = APIRouter()
logger = logging.getLogger(__name__)

def row_to_employee(row) -> Employee:
    return Employee(
        employee_id=row['employee_id'],
        name=row['name'],
        email=row['email'],
        department=row['department'],
    )

@router.get("/employees", response_model=List[Employee])
async def list_employees():
    """List all employees"""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM employees ORDER BY employee_id")
        return [row_to_employee(emp) for emp in cursor.fetchall()]

@router.get("/employees/count")
async def count_employees():
    """Get total employees count (for HR Dashboard)"""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT COUNT(*) FROM employees")
        return {"total": cursor.fetchone()[0]}

@router.post("/employees", response_model=Employee)
async def create_employee(employee: EmployeeCreate):
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute('''
            INSERT INTO employees (name, email, department) VALUES (?, ?, ?)
        ''', (employee.name, employee.email, employee.department))
        employee_id = cursor.lastrowid
        conn.commit()

    logger.info(f"Employee {employee.name} added to directory ({employee_id})")
    return Employee(employee_id=employee_id, **employee.model_dump())

@router.get("/employees/{employee_id}", response_model=Employee)
async def get_employee_by_id(employee_id: int):
    """Get a single employee by employee_id"""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM employees WHERE employee_id = ?", (employee_id,))
        emp = cursor.fetchone()

        if emp is None:
            raise HTTPException(status_code=404, detail="Employee not found")

        return row_to_employee(emp)

@router.put("/employees/{employee_id}")
async def update_employee(employee_id: int, employee: EmployeeCreate):
    """Update the supplied fields of an employee"""
    updates = employee.model_dump(exclude_unset=True)

    with get_db() as conn:
        cursor = conn.cursor()
        if updates:
            assignments = ", ".join(f"{column} = ?" for column in updates)
            cursor.execute(
                f"UPDATE employees SET {assignments} WHERE employee_id = ?",
                list(updates.values()) + [employee_id]
            )

        cursor.execute("SELECT * FROM employees WHERE employee_id = ?", (employee_id,))
        emp = cursor.fetchone()
        if emp is None:
            raise HTTPException(status_code=404, detail="Employee not found")
        conn.commit()

    return {"message": "Employee updated successfully", "employee": row_to_employee(emp)}

@router.delete("/employees/{employee_id}")
async def delete_employee(employee_id: int):
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("DELETE FROM employees WHERE employee_id = ?", (employee_id,))

        if cursor.rowcount == 0:
            raise HTTPException(status_code=404, detail="Employee not found")
        conn.commit()

    logger.info(f"Employee {employee_id} deleted")
    return {"message": "Employee deleted successfully"}
