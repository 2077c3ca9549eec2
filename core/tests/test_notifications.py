import pytest

from core.models import Notification
from core.services.notifications import notify, notify_many

pytestmark = pytest.mark.django_db


@pytest.fixture
def inbox(guardian, hospital):
    first = notify(guardian, Notification.TYPE_PAYMENT_COMPLETED, '결제 완료', '18,000원이 결제되었습니다.', hospital=hospital)
    second = notify(guardian, Notification.TYPE_PAYMENT_REFUNDED, '환불 완료', hospital=hospital, data={'paymentId': 1})
    return first, second


def test_list_is_newest_first(client_for, guardian, inbox):
    r = client_for(guardian).get('/api/notifications')
    assert r.status_code == 200
    assert r.data['meta']['total'] == 2
    assert [n['type'] for n in r.data['data']] == ['PAYMENT_REFUNDED', 'PAYMENT_COMPLETED']
    assert r.data['data'][0]['data'] == {'paymentId': 1}


def test_mark_read_and_unread_count(client_for, guardian, inbox):
    client = client_for(guardian)
    assert client.get('/api/notifications/unread-count').data['count'] == 2

    r = client.patch(f'/api/notifications/{inbox[0].id}/read')
    assert r.data['data']['isRead'] is True
    assert r.data['data']['readAt'] is not None
    assert client.get('/api/notifications/unread-count').data['count'] == 1

    r = client.get('/api/notifications', {'unreadOnly': 'true'})
    assert [n['id'] for n in r.data['data']] == [inbox[1].id]


def test_read_all(client_for, guardian, inbox):
    client = client_for(guardian)
    assert client.patch('/api/notifications/read-all').data['updated'] == 2
    assert client.patch('/api/notifications/read-all').data['updated'] == 0


def test_other_users_notification_is_not_found(client_for, staff_user, inbox):
    r = client_for(staff_user).patch(f'/api/notifications/{inbox[0].id}/read')
    assert r.status_code == 404
    assert r.data['error']['message'] == '알림을 찾을 수 없습니다'
    assert client_for(staff_user).get('/api/notifications').data['meta']['total'] == 0


def test_notify_many_counts_recipients(admin_user, staff_user, hospital):
    n = notify_many([admin_user, staff_user], Notification.TYPE_CUSTOM, '공지', hospital=hospital)
    assert n == 2
    assert Notification.objects.filter(type='CUSTOM').count() == 2


def test_requires_login(client):
    assert client.get('/api/notifications').status_code in (401, 403)
