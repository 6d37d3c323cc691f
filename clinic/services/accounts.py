"""
Account lifecycle: signup, profile changes and the admin operations.

Uniqueness of username, email and phone number is enforced here and
reported as ``Conflict`` (409).  Every administrative change is written
to the audit log.
"""
import logging
from typing import Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q
from rest_framework.exceptions import ValidationError

from clinic.exceptions import Conflict
from clinic.services.audit import log_action
from clinic.services.notifications import notify

User = get_user_model()
logger = logging.getLogger(__name__)


def ensure_unique(*, username: Optional[str] = None, email: Optional[str] = None,
                  phone_number: Optional[str] = None, exclude_id: Optional[int] = None) -> None:
    others = User.objects.all()
    if exclude_id is not None:
        others = others.exclude(id=exclude_id)
    if username and others.filter(username__iexact=username).exists():
        raise Conflict('This username is already taken.')
    if email and others.filter(email__iexact=email).exists():
        raise Conflict('This email is already registered.')
    if phone_number and others.filter(phone_number=phone_number).exists():
        raise Conflict('This phone number is already registered.')


@transaction.atomic
def signup(*, username: str, password: str, email: str, phone_number: str = '', request_ip=None):
    ensure_unique(username=username, email=email, phone_number=phone_number)
    user = User.objects.create_user(
        username=username, password=password, email=email,
        phone_number=phone_number, role=User.ROLE_USER, status=User.STATUS_PENDING,
    )
    log_action(user=user, action='signup', object_type='user', object_id=user.id, detail={'ip': request_ip})
    for admin in User.objects.filter(role=User.ROLE_ADMIN):
        notify(admin, title='New account awaiting approval',
               description=f'{user.username} ({user.email}) signed up and needs approval.')
    logger.info("New signup %s awaiting approval", user.username)
    return user


def update_profile(user, data: dict):
    email = data.get('email')
    phone = data.get('phoneNumber')
    ensure_unique(email=email, phone_number=phone, exclude_id=user.id)
    fields = []
    if email is not None:
        user.email = email
        fields.append('email')
    if phone is not None:
        user.phone_number = phone
        fields.append('phone_number')
    if 'isFirstLogin' in data:
        user.is_first_login = data['isFirstLogin']
        fields.append('is_first_login')
    if fields:
        user.save(update_fields=fields)
    return user


def change_password(user, old_password: str, new_password: str):
    if not user.check_password(old_password):
        raise ValidationError({'oldPassword': ['Current password is incorrect.']})
    user.set_password(new_password)
    user.save(update_fields=['password'])
    log_action(user=user, action='change_password', object_type='user', object_id=user.id)
    return user


def list_users(*, status: Optional[str] = None, role: Optional[str] = None, q: Optional[str] = None):
    qs = User.objects.order_by('-date_joined')
    if status:
        qs = qs.filter(status=status)
    if role:
        qs = qs.filter(role=role)
    if q:
        qs = qs.filter(Q(username__icontains=q) | Q(email__icontains=q) | Q(phone_number__icontains=q))
    return qs


@transaction.atomic
def add_user(actor, *, username: str, password: str, email: str, phone_number: str = '', role: str = 'user'):
    ensure_unique(username=username, email=email, phone_number=phone_number)
    user = User.objects.create_user(
        username=username, password=password, email=email,
        phone_number=phone_number, role=role, status=User.STATUS_ACTIVE,
    )
    log_action(user=actor, action='user_create', object_type='user', object_id=user.id,
               detail={'username': username, 'role': role})
    return user


@transaction.atomic
def update_user(actor, target, data: dict):
    ensure_unique(
        username=data.get('username'), email=data.get('email'),
        phone_number=data.get('phoneNumber'), exclude_id=target.id,
    )
    changed = []
    for key, field in [('username', 'username'), ('email', 'email'), ('phoneNumber', 'phone_number'),
                       ('role', 'role'), ('status', 'status')]:
        if key in data:
            setattr(target, field, data[key])
            changed.append(field)
    if data.get('password'):
        target.set_password(data['password'])
        changed.append('password')
    if changed:
        target.save(update_fields=changed)
        log_action(user=actor, action='user_update', object_type='user', object_id=target.id,
                   detail={'fields': changed})
    return target


def delete_user(actor, target):
    if target.username == settings.DEFAULT_ADMIN_USERNAME:
        raise ValidationError({'detail': 'The default administrator cannot be deleted.'})
    if target.id == actor.id:
        raise ValidationError({'detail': 'You cannot delete your own account.'})
    uid, username = target.id, target.username
    target.delete()
    log_action(user=actor, action='user_delete', object_type='user', object_id=uid, detail={'username': username})


def set_role(actor, target, role: str):
    target.role = role
    target.save(update_fields=['role'])
    log_action(user=actor, action='user_role', object_type='user', object_id=target.id, detail={'role': role})
    return target


def toggle_active(actor, target):
    target.status = User.STATUS_PENDING if target.status == User.STATUS_ACTIVE else User.STATUS_ACTIVE
    target.save(update_fields=['status'])
    log_action(user=actor, action='user_status', object_type='user', object_id=target.id, detail={'status': target.status})
    return target


def approve(actor, target):
    if target.status != User.STATUS_PENDING:
        return target
    target.status = User.STATUS_ACTIVE
    target.save(update_fields=['status'])
    log_action(user=actor, action='user_approve', object_type='user', object_id=target.id)
    notify(target, title='Account approved', description='An administrator approved your account.')
    return target
