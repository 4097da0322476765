from datetime import timedelta

import pytest
from httpx import AsyncClient
from starlette.websockets import WebSocketDisconnect

from ngo_portal.models.user_model import User
from ngo_portal.security import create_access_token


@pytest.fixture
def registration_data():
    return {
        'name': 'Jane Member',
        'email': 'jane.member@example.org',
        'password': 'testpassword123',
        'phone': '01711111111',
        'address': '12 Main Street',
    }


@pytest.mark.asyncio
async def test_register_member(client: AsyncClient, registration_data):
    response = await client.post('/users/register', data=registration_data)

    assert response.status_code == 201
    data = response.json()['data']
    assert data['email'] == registration_data['email']
    assert data['role'] == 'member'
    assert data['approval_status'] is None
    assert 'password' not in data


@pytest.mark.asyncio
async def test_register_company_starts_pending(client: AsyncClient, registration_data):
    registration_data.update(role='company', company='Acme Co', email='acme@example.com')
    response = await client.post('/users/register', data=registration_data)

    assert response.status_code == 201
    data = response.json()['data']
    assert data['approval_status'] == 'pending'
    assert data['is_approved'] is False


@pytest.mark.asyncio
async def test_register_ngo_without_documents(client: AsyncClient, db_session):
    """NGO registration needs at least one document"""
    response = await client.post('/users/register', data={
        'name': 'Helping Hands',
        'email': 'hello@helpinghands.org',
        'password': 'testpassword123',
        'role': 'ngo',
    })

    assert response.status_code == 400
    assert response.json()['error'] == 'VALIDATION_ERROR'
    assert 'Documents are required' in response.json()['message']
    assert db_session.query(User).count() == 0


@pytest.mark.asyncio
async def test_register_ngo_with_documents(client: AsyncClient):
    response = await client.post(
        '/users/register',
        data={
            'name': 'Helping Hands',
            'email': 'hello@helpinghands.org',
            'password': 'testpassword123',
            'role': 'ngo',
        },
        files=[
            ('documents', ('registration.pdf', b'%PDF-1.4 test', 'application/pdf')),
            ('documents', ('board.docx', b'docx bytes', 'application/octet-stream')),
        ],
    )

    assert response.status_code == 201
    data = response.json()['data']
    assert data['approval_status'] == 'pending'
    assert len(data['documents']) == 2
    assert all(path.startswith('/uploads/documents/') for path in data['documents'])


@pytest.mark.asyncio
async def test_register_rejects_bad_document_type(client: AsyncClient):
    response = await client.post(
        '/users/register',
        data={'name': 'Helping Hands', 'email': 'hh@example.org', 'password': 'pw123456', 'role': 'ngo'},
        files=[('documents', ('payload.exe', b'MZ', 'application/octet-stream'))],
    )

    assert response.status_code == 400
    assert 'Invalid file type' in response.json()['message']


@pytest.mark.asyncio
async def test_register_as_admin_is_refused(client: AsyncClient, registration_data, db_session):
    registration_data['role'] = 'admin'
    response = await client.post('/users/register', data=registration_data)

    assert response.status_code == 400
    assert db_session.query(User).filter(User.role == 'admin').count() == 0


@pytest.mark.asyncio
async def test_register_missing_fields(client: AsyncClient):
    response = await client.post('/users/register', data={'name': 'No Email'})
    assert response.status_code == 400
    assert response.json()['message'] == 'Name, email, and password are required'


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, registration_data):
    await client.post('/users/register', data=registration_data)
    response = await client.post('/users/register', data=registration_data)

    assert response.status_code == 400
    assert response.json()['message'] == 'User already exists'


@pytest.mark.asyncio
async def test_login_member(client: AsyncClient, member_user):
    response = await client.post('/users/login', json={'email': 'jane@example.org', 'password': 'testpassword123'})

    assert response.status_code == 200
    data = response.json()['data']
    assert data['token']
    assert data['role'] == 'member'
    assert 'approvalStatus' not in data


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, member_user):
    response = await client.post('/users/login', json={'email': 'jane@example.org', 'password': 'nope'})

    assert response.status_code == 401
    assert response.json()['error'] == 'AUTH_FAILED'


@pytest.mark.asyncio
async def test_login_unknown_email(client: AsyncClient):
    response = await client.post('/users/login', json={'email': 'ghost@example.org', 'password': 'whatever'})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_gate_for_pending_company(client: AsyncClient, pending_company):
    """Correct credentials on a pending account: identity confirmed, no usable session"""
    ok = await client.post('/users/login', json={'email': 'acme@example.com', 'password': 'testpassword123'})
    assert ok.status_code == 403
    body = ok.json()
    assert body['error'] == 'ACCOUNT_NOT_APPROVED'
    assert body['approvalStatus'] == 'pending'
    assert body['isApproved'] is False
    assert 'token' not in body

    bad = await client.post('/users/login', json={'email': 'acme@example.com', 'password': 'wrong-password'})
    assert bad.status_code == 401
    assert 'approvalStatus' not in bad.json()


@pytest.mark.asyncio
async def test_missing_token(client: AsyncClient):
    response = await client.get('/users/profile')
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_invalid_token(client: AsyncClient):
    response = await client.get('/users/profile', headers={'Authorization': 'Bearer not-a-token'})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_expired_token(client: AsyncClient, member_user):
    token = create_access_token(member_user, expires_delta=timedelta(minutes=-5))
    response = await client.get('/users/profile', headers={'Authorization': f'Bearer {token}'})

    assert response.status_code == 401
    assert response.json()['message'] == 'Token has expired'


@pytest.mark.asyncio
async def test_member_cannot_reach_admin_routes(client: AsyncClient, member_headers):
    response = await client.get('/users/getalluser', headers=member_headers)

    assert response.status_code == 403
    assert response.json()['message'] == 'Admin access only'


@pytest.mark.asyncio
async def test_profile_update_cannot_change_role(client: AsyncClient, member_headers, member_user, db_session):
    response = await client.put(
        '/users/profile',
        headers=member_headers,
        data={'name': 'Jane Doe', 'role': 'admin'},
    )

    assert response.status_code == 200
    db_session.refresh(member_user)
    assert member_user.name == 'Jane Doe'
    assert member_user.role == 'member'


@pytest.mark.asyncio
async def test_admin_lists_users_by_role(client: AsyncClient, admin_headers, member_user, pending_company):
    response = await client.get('/users/getalluser', params={'role': 'company'}, headers=admin_headers)

    assert response.status_code == 200
    assert [u['id'] for u in response.json()['data']] == [pending_company.id]


@pytest.mark.asyncio
async def test_role_change_into_workflow_starts_pending(client: AsyncClient, admin_headers, member_user, db_session):
    response = await client.put(f'/users/update/{member_user.id}/role', headers=admin_headers, json={'role': 'ngo'})

    assert response.status_code == 200
    db_session.refresh(member_user)
    assert member_user.role == 'ngo'
    assert member_user.approval_status == 'pending'


@pytest.mark.asyncio
async def test_role_change_out_of_workflow_clears_approval(
    client: AsyncClient, admin_headers, pending_company, db_session
):
    response = await client.put(
        f'/users/update/{pending_company.id}/role', headers=admin_headers, json={'role': 'donor'}
    )

    assert response.status_code == 200
    db_session.refresh(pending_company)
    assert pending_company.approval_status is None
    assert pending_company.is_approved is None


@pytest.mark.asyncio
async def test_token_of_deleted_account(client: AsyncClient, admin_headers, member_user, headers_for):
    member_headers = headers_for(member_user)
    await client.delete(f'/users/delete/{member_user.id}', headers=admin_headers)

    response = await client.get('/users/profile', headers=member_headers)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_old_token_blocked_after_role_change_to_company(
    client: AsyncClient, admin_headers, member_user, member_headers
):
    """A token issued before the account became a pending company stops working"""
    response = await client.put(
        f'/users/update/{member_user.id}/role', headers=admin_headers, json={'role': 'company'}
    )
    assert response.status_code == 200

    response = await client.post(
        '/programs/create/program',
        headers=member_headers,
        data={
            'title': 'Sneaky Program',
            'description': 'Should not be created',
            'startingDate': '2026-11-01',
            'endingDate': '2026-11-30',
            'day': 'Monday',
            'time': '06:00 PM',
        },
    )

    assert response.status_code == 403
    body = response.json()
    assert body['error'] == 'ACCOUNT_NOT_APPROVED'
    assert body['approvalStatus'] == 'pending'

    response = await client.get('/programs/company/dashboard', headers=member_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_rejected_account_token_is_refused(client: AsyncClient, make_user, headers_for):
    rejected = make_user(role='ngo', approval_status='rejected', rejection_reason='Unverified')

    response = await client.get('/users/profile', headers=headers_for(rejected))

    assert response.status_code == 403
    assert response.json()['rejectionReason'] == 'Unverified'


@pytest.mark.asyncio
async def test_register_rejects_reserved_email_domain(client: AsyncClient, registration_data, db_session):
    registration_data['email'] = 'sam@ngo.test'
    response = await client.post('/users/register', data=registration_data)

    assert response.status_code == 400
    assert response.json()['error'] == 'VALIDATION_ERROR'
    assert db_session.query(User).count() == 0


@pytest.mark.asyncio
async def test_login_with_unusual_email_is_plain_failure(client: AsyncClient):
    response = await client.post('/users/login', json={'email': 'sam@ngo.test', 'password': 'whatever'})

    assert response.status_code == 401
    assert response.json()['message'] == 'Invalid credentials'


@pytest.mark.asyncio
async def test_login_with_stored_unusual_email(client: AsyncClient, make_user):
    make_user(email='ops@portal.test')
    response = await client.post('/users/login', json={'email': 'ops@portal.test', 'password': 'testpassword123'})

    assert response.status_code == 200
    assert response.json()['data']['token']


@pytest.mark.asyncio
async def test_malformed_login_body(client: AsyncClient):
    response = await client.post('/users/login', json={'email': 'jane@example.org'})

    assert response.status_code == 400
    body = response.json()
    assert body['error'] == 'VALIDATION_ERROR'
    assert body['code'] == 400
    assert body['errors'][0]['loc'] == ['body', 'password']


def test_admin_feed_accepts_admin(ws_client, admin_user):
    token = create_access_token(admin_user)
    with ws_client.websocket_connect(f'/users/ws/admin?token={token}'):
        pass


def test_admin_feed_refuses_demoted_admin(ws_client, admin_user, db_session):
    token = create_access_token(admin_user)
    admin_user.role = 'member'
    db_session.commit()

    with pytest.raises(WebSocketDisconnect) as exc_info:
        with ws_client.websocket_connect(f'/users/ws/admin?token={token}'):
            pass
    assert exc_info.value.code == 1008


def test_admin_feed_refuses_deleted_admin(ws_client, admin_user, db_session):
    token = create_access_token(admin_user)
    db_session.delete(admin_user)
    db_session.commit()

    with pytest.raises(WebSocketDisconnect) as exc_info:
        with ws_client.websocket_connect(f'/users/ws/admin?token={token}'):
            pass
    assert exc_info.value.code == 1008
