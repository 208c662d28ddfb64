"""
Multi-tenant data isolation tests.

A second tenant must never see, change or book against the first
tenant's records.
"""
from .conftest import API
from .test_base import BaseAPITest


class TestTenantIsolation(BaseAPITest):

    def test_employees_are_invisible_to_other_tenant(self, client, auth_headers, different_tenant_headers, api_data):
        employee = api_data.employee(name="Alice")

        self.assert_not_found(client.get(f"{API}/employees/{employee['id']}", headers=different_tenant_headers))
        listed = client.get(f"{API}/employees/", headers=different_tenant_headers).json()
        assert listed["total"] == 0

    def test_other_tenant_cannot_book_foreign_employee(self, client, auth_headers, different_tenant_headers, api_data):
        employee = api_data.employee()

        response = client.post(f"{API}/time-entries/", headers=different_tenant_headers, json={
            "employee_id": employee["id"], "work_date": "2024-03-01"
        })
        self.assert_not_found(response)

        batch = client.post(f"{API}/time-entries/batch", headers=different_tenant_headers, json={
            "employee_ids": [employee["id"]], "work_dates": ["2024-03-01"]
        }).json()
        assert batch["created"] == 0
        assert batch["details"][0]["reason"] == "employee not found"

    def test_time_entries_are_invisible_to_other_tenant(self, client, auth_headers, different_tenant_headers, api_data):
        employee = api_data.employee()
        entry = api_data.entry(employee["id"], "2024-03-01")
        url = f"{API}/time-entries/{entry['id']}"

        self.assert_not_found(client.put(url, headers=different_tenant_headers, json={
            "employee_id": employee["id"], "work_date": "2024-03-01",
            "normal_hours": 4, "overtime_hours": 0
        }))
        self.assert_not_found(client.delete(url, headers=different_tenant_headers))

        listed = client.get(f"{API}/time-entries/", headers=different_tenant_headers,
                            params={"date": "2024-03-01"}).json()
        assert listed["total"] == 0

        still_there = client.get(f"{API}/time-entries/", headers=auth_headers, params={"date": "2024-03-01"}).json()
        assert still_there["total"] == 1

    def test_same_project_name_in_two_tenants(self, client, auth_headers, different_tenant_headers, api_data):
        api_data.project(name="Bridge")
        response = client.post(f"{API}/projects/", headers=different_tenant_headers, json={"name": "Bridge"})
        assert response.status_code == 201
