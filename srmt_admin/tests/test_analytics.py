"""
Тесты выгрузки HR-аналитики
"""


def test_export_not_implemented(client, auth_headers):
    response = client.get("/api/v1/hrm/analytics/export", headers=auth_headers("hr"))

    assert response.status_code == 501
    assert response.json() == {"status": 501, "error": "Export is not implemented"}


def test_export_requires_hr_role(client, auth_headers):
    response = client.get("/api/v1/hrm/analytics/export", headers=auth_headers("sc"))

    assert response.status_code == 403
