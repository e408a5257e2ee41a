import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from impact_backend.routes.opportunity_routes import (
    CreateOpportunityRequest,
    UpdateOpportunityRequest,
    create_opportunity,
    list_my_opportunities,
    list_opportunities,
    update_opportunity,
)


def _create_request(**fields) -> CreateOpportunityRequest:
    payload = {
        'title': 'Saturday literacy club',
        'shortDescription': 'Reading sessions with primary school children.',
        'fullDescription': 'Volunteers run small reading groups at the partner school.',
        'type': 'teaching',
        'duration': '1week',
    }
    payload.update(fields)
    return CreateOpportunityRequest.model_validate(payload)


def test_create_opportunity_request_applies_reward_defaults() -> None:
    request = _create_request(skills=[' Reading ', '', 'Patience'])

    assert request.coins_per_hour == 10
    assert request.max_coins == 100
    assert request.status == 'open'
    assert request.skills == ['Reading', 'Patience']


def test_create_opportunity_request_rejects_unknown_type() -> None:
    with pytest.raises(ValidationError):
        _create_request(type='fundraising')


def test_create_opportunity_request_rejects_long_short_description() -> None:
    with pytest.raises(ValidationError):
        _create_request(shortDescription='x' * 161)


def test_create_opportunity_records_creator(impact_db, make_user) -> None:
    admin = make_user(role='admin')

    response = create_opportunity(data=_create_request(totalRequiredHours=20), current_user=admin, db=impact_db)

    assert response.created_by == admin.id
    assert response.total_required_hours == 20
    assert response.application_count == 0
    assert [opportunity.id for opportunity in list_my_opportunities(current_user=admin, db=impact_db)] == [response.id]


def test_update_opportunity_ignores_null_required_fields(impact_db, make_user, make_opportunity) -> None:
    admin = make_user(role='admin')
    opportunity = make_opportunity(created_by=admin.id, location='Koramangala')

    response = update_opportunity(
        opportunity_id=opportunity.id,
        data=UpdateOpportunityRequest.model_validate({'title': None, 'location': None, 'maxCoins': 150}),
        current_user=admin,
        db=impact_db,
    )

    assert response.title == 'Weekend tutoring'
    assert response.location is None
    assert response.max_coins == 150


def test_update_missing_opportunity_returns_not_found(impact_db, make_user) -> None:
    admin = make_user(role='admin')

    with pytest.raises(HTTPException) as exception_info:
        update_opportunity(
            opportunity_id=404,
            data=UpdateOpportunityRequest(status='closed'),
            current_user=admin,
            db=impact_db,
        )

    assert exception_info.value.status_code == 404


def test_list_opportunities_returns_counts_and_total(impact_db, make_user, make_opportunity, make_application) -> None:
    opportunity = make_opportunity(skills=['Teaching'])
    make_opportunity(title='Archived drive', status='closed')
    make_application(make_user(), opportunity)

    response = list_opportunities(
        search=None,
        type=None,
        duration=None,
        skills=None,
        status=None,
        limit=12,
        offset=0,
        db=impact_db,
    )

    assert response.total == 1
    assert response.opportunities[0].application_count == 1
    assert response.opportunities[0].skills == ['Teaching']
