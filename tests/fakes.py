"""In-memory repositories and a scripted HTTP transport shared by the tests."""

from __future__ import annotations

import json
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from requests import Response
from requests.adapters import BaseAdapter

from workforce_portal.attendance.model import AttendanceRecord, AttendanceReportRow
from workforce_portal.auth.model import User
from workforce_portal.companies.model import Company, default_working_days
from workforce_portal.core.enums import InvitationStatus, SubscriptionPlan, SubscriptionStatus
from workforce_portal.employees.model import Invitation
from workforce_portal.files.model import CompanyFile, StoredFile

CREATED = datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)


class FakeUserRepo:
    def __init__(self):
        self._next_id = 1
        self.users: dict[int, User] = {}

    def add(self, **fields) -> User:
        fields.setdefault("password_hash", "x")
        fields.setdefault("email_verified", True)
        user = User(user_id=self._next_id, **fields)
        self.users[user.user_id] = user
        self._next_id += 1
        return user

    def get_by_id(self, user_id):
        return self.users.get(int(user_id))

    def get_by_email(self, email):
        email = email.strip().lower()
        return next((u for u in self.users.values() if u.email == email), None)

    def create_user(self, *, company_id, email, password_hash, first_name, last_name, role, email_verified=False, position=None):
        user = self.add(
            company_id=company_id,
            email=email.lower(),
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            role=role,
            email_verified=email_verified,
            position=position,
            created_at=CREATED,
        )
        return user.user_id

    def update_fields(self, user_id, changes):
        user = self.users.get(int(user_id))
        if not user:
            return False
        self.users[user.user_id] = replace(user, **dict(changes))
        return True

    def list_for_company(self, company_id, *, role=None, is_active=None, search=None, offset=0, limit=20):
        rows = [u for u in self.users.values() if u.company_id == company_id]
        if role is not None:
            rows = [u for u in rows if u.role == role]
        if is_active is not None:
            rows = [u for u in rows if u.is_active == is_active]
        if search:
            needle = search.lower()
            rows = [u for u in rows if needle in f"{u.first_name} {u.last_name} {u.email}".lower()]
        return rows[offset : offset + limit], len(rows)

    def count_active(self, company_id):
        return sum(1 for u in self.users.values() if u.company_id == company_id and u.is_active)


class FakeCompanyRepo:
    def __init__(self):
        self._next_id = 1
        self.companies: dict[int, Company] = {}

    def add(self, **fields) -> Company:
        fields.setdefault("name", "Acme Ltd")
        company = Company(company_id=self._next_id, **fields)
        self.companies[company.company_id] = company
        self._next_id += 1
        return company

    def get_by_id(self, company_id):
        return self.companies.get(int(company_id))

    def create_company(self, *, name, email):
        return self.add(
            name=name,
            email=email,
            subscription_plan=SubscriptionPlan.TRIAL,
            subscription_status=SubscriptionStatus.TRIAL,
            working_days=default_working_days(),
        ).company_id

    def update_fields(self, company_id, changes):
        company = self.companies.get(int(company_id))
        if not company:
            return False
        self.companies[company.company_id] = replace(company, **dict(changes))
        return True


class FakeInvitationRepo:
    def __init__(self):
        self._next_id = 1
        self.invitations: dict[int, Invitation] = {}

    def create_invitation(self, *, company_id, invited_by, email, first_name, last_name, role, position, token, expires_at):
        invitation = Invitation(
            invitation_id=self._next_id,
            company_id=company_id,
            invited_by=invited_by,
            email=email,
            first_name=first_name,
            last_name=last_name,
            role=role,
            token=token,
            status=InvitationStatus.PENDING,
            expires_at=expires_at,
            position=position,
            created_at=CREATED,
        )
        self.invitations[invitation.invitation_id] = invitation
        self._next_id += 1
        return invitation.invitation_id

    def get_by_id(self, invitation_id):
        return self.invitations.get(int(invitation_id))

    def get_by_token(self, token):
        return next((i for i in self.invitations.values() if i.token == token), None)

    def _pending(self, company_id, now):
        return [
            i
            for i in self.invitations.values()
            if i.company_id == company_id and i.status == InvitationStatus.PENDING and not i.is_expired(now)
        ]

    def find_pending_for_email(self, company_id, email, *, now):
        return next((i for i in self._pending(company_id, now) if i.email == email), None)

    def list_for_company(self, company_id):
        rows = [i for i in self.invitations.values() if i.company_id == company_id]
        return sorted(rows, key=lambda i: i.invitation_id, reverse=True)

    def count_pending(self, company_id, *, now):
        return len(self._pending(company_id, now))

    def update_status(self, invitation_id, status, *, accepted_at=None):
        invitation = self.invitations.get(int(invitation_id))
        if not invitation:
            return False
        self.invitations[invitation.invitation_id] = replace(invitation, status=status, accepted_at=accepted_at)
        return True


class FakeFileRepo:
    def __init__(self):
        self._next_id = 1
        self.files: dict[int, StoredFile] = {}
        # (company_id, document_type) -> CompanyFile
        self.links: dict[tuple, CompanyFile] = {}

    def get_by_id(self, file_id):
        return self.files.get(int(file_id))

    def get_by_hash(self, file_hash):
        return next((f for f in self.files.values() if f.file_hash == file_hash), None)

    def create_file(self, *, file_hash, original_filename, mime_type, size, storage_path, uploaded_by):
        stored = StoredFile(
            file_id=self._next_id,
            file_hash=file_hash,
            original_filename=original_filename,
            mime_type=mime_type,
            size=size,
            storage_path=storage_path,
            uploaded_by=uploaded_by,
            created_at=CREATED,
        )
        self.files[stored.file_id] = stored
        self._next_id += 1
        return stored.file_id

    def delete_file(self, file_id):
        return self.files.pop(int(file_id), None) is not None

    def attach(self, *, company_id, file_id, document_type, attached_by, purpose=None):
        self.links[(company_id, document_type)] = CompanyFile(
            company_id=company_id,
            file=self.files[int(file_id)],
            document_type=document_type,
            attached_by=attached_by,
            purpose=purpose,
            attached_at=CREATED,
        )

    def detach(self, company_id, file_id):
        keys = [k for k, link in self.links.items() if k[0] == company_id and link.file.file_id == file_id]
        for key in keys:
            del self.links[key]
        return len(keys)

    def count_links(self, file_id):
        return sum(1 for link in self.links.values() if link.file.file_id == file_id)

    def list_company_files(self, company_id, document_type=None):
        return [
            link
            for (cid, dtype), link in self.links.items()
            if cid == company_id and (document_type is None or dtype == document_type)
        ]

    def is_linked_to_company(self, company_id, file_id):
        return any(cid == company_id and link.file.file_id == file_id for (cid, _), link in self.links.items())


class FakeProgressRepo:
    def __init__(self):
        self.rows = {}

    def get(self, user_id):
        return self.rows.get(user_id)

    def upsert(self, progress):
        self.rows[progress.user_id] = progress

    def delete(self, user_id):
        return self.rows.pop(user_id, None) is not None


class FakeAttendanceRepo:
    def __init__(self, users: Optional[FakeUserRepo] = None):
        self._next_id = 1
        self.records: dict[int, AttendanceRecord] = {}
        self._users = users

    def get_by_id(self, attendance_id):
        return self.records.get(int(attendance_id))

    def get_for_user_and_date(self, user_id, work_date):
        rows = [r for r in self.records.values() if r.user_id == user_id and r.work_date == work_date]
        return max(rows, key=lambda r: r.attendance_id, default=None)

    def create_clock_in(self, *, company_id, user_id, work_date, clock_in_time, distance_meters, is_within_geofence, status, minutes_late):
        record = AttendanceRecord(
            attendance_id=self._next_id,
            company_id=company_id,
            user_id=user_id,
            work_date=work_date,
            clock_in_time=clock_in_time,
            status=status,
            clock_in_distance_meters=distance_meters,
            is_within_geofence=is_within_geofence,
            minutes_late=minutes_late,
        )
        self.records[record.attendance_id] = record
        self._next_id += 1
        return record.attendance_id

    def update_clock_out(self, *, attendance_id, clock_out_time, distance_meters, status, minutes_early, departure_reason):
        record = self.records[int(attendance_id)]
        self.records[record.attendance_id] = replace(
            record,
            clock_out_time=clock_out_time,
            clock_out_distance_meters=distance_meters,
            status=status,
            minutes_early=minutes_early,
            departure_reason=departure_reason,
        )

    def get_recent_for_user(self, user_id, limit):
        rows = sorted((r for r in self.records.values() if r.user_id == user_id), key=lambda r: r.work_date, reverse=True)
        return rows[:limit]

    def list_for_company_and_date(self, company_id, work_date):
        rows = []
        for record in self.records.values():
            if record.company_id != company_id or record.work_date != work_date:
                continue
            user = self._users.get_by_id(record.user_id) if self._users else None
            rows.append(
                AttendanceReportRow(
                    record=record,
                    full_name=user.full_name if user else "",
                    email=user.email if user else "",
                )
            )
        return rows


class ScriptedAdapter(BaseAdapter):
    """requests transport that replays canned responses in order and records calls."""

    def __init__(self, *script):
        super().__init__()
        self.script = list(script)
        self.calls: list[tuple[str, str]] = []

    def queue(self, status, body=None):
        self.script.append((status, body))
        return self

    def send(self, request, **kwargs):
        self.calls.append((request.method, request.path_url))
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        status, body = item
        response = Response()
        response.status_code = status
        response._content = b"" if body is None else json.dumps(body).encode()
        response.headers["Content-Type"] = "application/json"
        response.encoding = "utf-8"
        response.url = request.url
        response.request = request
        return response

    def close(self):
        pass
