"""Mock employee directory."""

from __future__ import annotations

import random
from datetime import date, timedelta
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from .base import ChartAggregation, Column, DataSource, FilterModel, Record, as_points, count_by, format_money

FIRST_NAMES = [
    "James", "Mary", "John", "Patricia", "Robert", "Jennifer", "Michael", "Linda",
    "William", "Elizabeth", "David", "Barbara", "Richard", "Susan", "Joseph", "Jessica",
    "Thomas", "Sarah", "Christopher", "Karen", "Charles", "Nancy", "Daniel", "Lisa",
    "Matthew", "Betty", "Anthony", "Margaret", "Mark", "Sandra",
]

LAST_NAMES = [
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis",
    "Rodriguez", "Martinez", "Hernandez", "Lopez", "Gonzalez", "Wilson", "Anderson",
    "Thomas", "Taylor", "Moore", "Jackson", "Martin", "Lee", "Perez", "Thompson",
    "White", "Harris", "Sanchez", "Clark", "Ramirez", "Lewis", "Robinson",
]

DEPARTMENTS = ["Engineering", "Sales", "Marketing", "Finance", "HR", "Operations", "Legal", "Product"]

TITLES = {
    "Engineering": ["Software Engineer", "Senior Software Engineer", "Staff Engineer", "Engineering Manager", "Tech Lead"],
    "Sales": ["Sales Representative", "Senior Sales Rep", "Account Executive", "Sales Manager", "Sales Director"],
    "Marketing": ["Marketing Coordinator", "Marketing Manager", "Content Strategist", "Brand Manager", "CMO"],
    "Finance": ["Financial Analyst", "Senior Analyst", "Finance Manager", "Controller", "CFO"],
    "HR": ["HR Coordinator", "HR Specialist", "HR Manager", "Recruiter", "HR Director"],
    "Operations": ["Operations Analyst", "Operations Manager", "Project Manager", "COO", "Facilities Manager"],
    "Legal": ["Legal Assistant", "Paralegal", "Corporate Counsel", "General Counsel", "Legal Director"],
    "Product": ["Product Manager", "Senior PM", "Product Director", "UX Designer", "Product Analyst"],
}

LOCATIONS = ["New York", "San Francisco", "Chicago", "Austin", "Seattle", "Boston", "Denver", "Remote"]

SALARY_RANGES = {
    "Engineering": (80_000, 200_000),
    "Sales": (60_000, 180_000),
    "Marketing": (55_000, 150_000),
    "Finance": (70_000, 180_000),
    "HR": (50_000, 130_000),
    "Operations": (55_000, 140_000),
    "Legal": (75_000, 220_000),
    "Product": (85_000, 190_000),
}

Department = Literal["Engineering", "Sales", "Marketing", "Finance", "HR", "Operations", "Legal", "Product"]
EmployeeStatus = Literal["ACTIVE", "ON_LEAVE", "TERMINATED"]


def generate_employees(count: int = 50, seed: int = 1001) -> List[Record]:
    rng = random.Random(seed)
    employees: List[Record] = []
    managers: List[str] = []
    start = date(2015, 1, 1)
    span = (date(2024, 12, 31) - start).days

    for i in range(1, count + 1):
        first = rng.choice(FIRST_NAMES)
        last = rng.choice(LAST_NAMES)
        department = rng.choice(DEPARTMENTS)
        title = rng.choice(TITLES[department])
        is_manager = any(word in title for word in ("Manager", "Director", "Lead"))
        low, high = SALARY_RANGES[department]
        roll = rng.random()
        status = "ACTIVE" if roll > 0.1 else ("ON_LEAVE" if rng.random() > 0.5 else "TERMINATED")

        employee = {
            "id": f"EMP-{i:04d}",
            "firstName": first,
            "lastName": last,
            "email": f"{first.lower()}.{last.lower()}@company.com",
            "department": department,
            "title": title,
            "salary": round((low + rng.random() * (high - low)) / 1000) * 1000,
            "hireDate": (start + timedelta(days=rng.randrange(span + 1))).isoformat(),
            "location": rng.choice(LOCATIONS),
            "manager": rng.choice(managers) if managers and not is_manager else None,
            "status": status,
        }
        if is_manager:
            managers.append(employee["id"])
        employees.append(employee)

    return sorted(employees, key=lambda e: e["lastName"])


class EmployeeFilters(FilterModel):
    first_name: Optional[str] = Field(default=None, description="Filter by first name")
    last_name: Optional[str] = Field(default=None, description="Filter by last name")
    department: Optional[Department] = None
    title: Optional[str] = Field(default=None, description="Filter by job title")
    location: Optional[str] = Field(default=None, description="Filter by office location")
    status: Optional[EmployeeStatus] = None
    min_salary: Optional[float] = Field(default=None, description="Minimum salary")
    max_salary: Optional[float] = Field(default=None, description="Maximum salary")


class EmployeesDataSource(DataSource):
    name = "employees"
    description = "Employee directory with department, salary, and location information"
    filter_model = EmployeeFilters
    columns = [
        Column("id", "ID"),
        Column("firstName", "First Name"),
        Column("lastName", "Last Name"),
        Column("department", "Department"),
        Column("title", "Title"),
        Column("salary", "Salary", money=True),
        Column("location", "Location"),
        Column("status", "Status"),
    ]
    chart_aggregations = [
        ChartAggregation("byDepartment", "Employees by Department", "name", "count", "bar"),
        ChartAggregation("byLocation", "Employees by Location", "name", "count", "bar"),
        ChartAggregation("byStatus", "Employees by Status", "name", "count", "pie"),
        ChartAggregation("avgSalaryByDept", "Average Salary by Department", "name", "salary", "bar"),
    ]

    contains_filters = ("firstName", "lastName", "title")
    exact_filters = ("department", "location", "status")
    bound_filters = {"minSalary": ("salary", "min"), "maxSalary": ("salary", "max")}
    aggregations = {
        "byDepartment": "_by_department",
        "byLocation": "_by_location",
        "byStatus": "_by_status",
        "avgSalaryByDept": "_avg_salary_by_department",
    }

    def _by_department(self, records: List[Record]) -> List[Record]:
        return as_points(count_by(records, "department"))

    def _by_location(self, records: List[Record]) -> List[Record]:
        return as_points(count_by(records, "location"))

    def _by_status(self, records: List[Record]) -> List[Record]:
        return as_points(count_by(records, "status"), sort=False)

    def _avg_salary_by_department(self, records: List[Record]) -> List[Record]:
        totals: Dict[str, List[int]] = {}
        for r in records:
            totals.setdefault(r["department"], []).append(r["salary"])
        averages = {dept: round(sum(s) / len(s)) for dept, s in totals.items()}
        return as_points(averages, "salary")

    def summary(self, records: List[Record]) -> Dict[str, Any]:
        avg = round(sum(r["salary"] for r in records) / len(records)) if records else 0
        return {
            "totalEmployees": len(records),
            "avgSalary": format_money(avg),
            "activeCount": sum(1 for r in records if r["status"] == "ACTIVE"),
        }


__all__ = ["generate_employees", "EmployeeFilters", "EmployeesDataSource"]
