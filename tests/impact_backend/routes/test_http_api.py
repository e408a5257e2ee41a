import pytest
from fastapi.testclient import TestClient

from impact_backend.auth.jwt_handler import create_access_token
from impact_backend.database import get_db
from impact_backend.main import app


@pytest.fixture
def client(impact_db):
    def override_get_db():
        yield impact_db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _auth_headers(user) -> dict[str, str]:
    return {'Authorization': f'Bearer {create_access_token(subject=str(user.id), role=user.role)}'}


def test_root_reports_running(client) -> None:
    response = client.get('/')

    assert response.status_code == 200
    assert response.json() == {'status': 'Social Impact Tracker API Running'}


def test_apply_returns_camel_case_application_and_rejects_duplicates(client, make_user, make_opportunity) -> None:
    student = make_user()
    opportunity = make_opportunity()

    first = client.post('/applications', json={'opportunityId': opportunity.id}, headers=_auth_headers(student))
    second = client.post('/applications', json={'opportunityId': opportunity.id}, headers=_auth_headers(student))

    assert first.status_code == 201
    assert first.json()['opportunityId'] == opportunity.id
    assert first.json()['userId'] == student.id
    assert first.json()['status'] == 'pending'
    assert second.status_code == 400
    assert second.json() == {'detail': 'Already applied to this opportunity.'}


def test_apply_to_closed_opportunity_is_rejected(client, make_user, make_opportunity) -> None:
    student = make_user()
    opportunity = make_opportunity(status='closed')

    response = client.post('/applications', json={'opportunityId': opportunity.id}, headers=_auth_headers(student))

    assert response.status_code == 400
    assert response.json()['detail'] == 'Opportunity is not accepting applications.'


def test_leaderboard_is_public(client, make_user) -> None:
    make_user(coins=25, first_name='Meera')

    response = client.get('/leaderboard', params={'limit': 5, 'timeframe': 'month'})

    assert response.status_code == 200
    assert response.json()[0]['firstName'] == 'Meera'
    assert response.json()[0]['completedApplications'] == 0
    assert response.json()[0]['rank'] == 1


def test_leaderboard_rejects_unknown_timeframe(client) -> None:
    response = client.get('/leaderboard', params={'timeframe': 'decade'})

    assert response.status_code == 422


def test_analytics_requires_admin(client, make_user) -> None:
    student = make_user()
    admin = make_user(role='admin')

    forbidden = client.get('/analytics', headers=_auth_headers(student))
    allowed = client.get('/analytics', headers=_auth_headers(admin))

    assert forbidden.status_code == 403
    assert allowed.status_code == 200
    assert len(allowed.json()['applicationsOverTime']) == 30


def test_completing_application_awards_coins(client, make_user, make_opportunity, make_application) -> None:
    student = make_user()
    admin = make_user(role='admin')
    application = make_application(student, make_opportunity(), status='accepted')

    response = client.put(
        f'/applications/{application.id}/status',
        json={'status': 'completed', 'hoursCompleted': 8},
        headers=_auth_headers(admin),
    )
    stats = client.get(f'/users/{student.id}/stats', headers=_auth_headers(student))

    assert response.status_code == 200
    assert response.json()['coinsAwarded'] == 80
    assert response.json()['coinsGranted'] == 80
    assert stats.json()['totalCoins'] == 80
    assert stats.json()['completedApplications'] == 1


def test_status_endpoint_refuses_hour_flow_targets(client, make_user, make_opportunity, make_application) -> None:
    student = make_user()
    admin = make_user(role='admin')
    application = make_application(student, make_opportunity(), status='accepted')

    response = client.put(
        f'/applications/{application.id}/status',
        json={'status': 'hours_submitted'},
        headers=_auth_headers(admin),
    )

    assert response.status_code == 400


def test_submit_zero_hours_is_rejected(client, make_user, make_opportunity, make_application) -> None:
    student = make_user()
    application = make_application(student, make_opportunity(), status='accepted')

    response = client.post(
        f'/applications/{application.id}/submit-hours',
        json={'hours': 0},
        headers=_auth_headers(student),
    )

    assert response.status_code == 400
    assert response.json() == {'detail': 'Hours must be greater than zero.'}


def test_invalid_token_is_unauthorized(client) -> None:
    response = client.get('/auth/me', headers={'Authorization': 'Bearer not-a-token'})

    assert response.status_code == 401
