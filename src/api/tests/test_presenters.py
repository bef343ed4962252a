"""Tests for allow-list presenters."""

import unittest
from dataclasses import dataclass, field
from datetime import datetime, timezone

from api.presenters import ACCESS_TOKEN, USER, USER_PAGE, Field, Presenter, present
from domain.model.errors import PresentationCycleError
from domain.model.user import User
from services.user_service import Page

NOW = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def _user(**overrides) -> User:
    defaults = dict(
        id='user-1',
        email='a@example.com',
        created_at=NOW,
        updated_at=NOW,
        first_name='Ada',
        last_name='Lovelace',
        password_hash='$2b$12$secret',
    )
    defaults.update(overrides)
    return User(**defaults)


@dataclass
class Team:
    name: str
    members: list = field(default_factory=list)
    parent: object = None


class TestUserPresenter(unittest.TestCase):

    def test_only_allow_listed_fields(self):
        data = present(_user(), USER)

        self.assertEqual(set(data), set(USER.field_names))
        self.assertNotIn('password_hash', data)
        self.assertNotIn('$2b$12$secret', str(data))

    def test_computed_and_rendered_fields(self):
        data = present(_user(), USER)

        self.assertEqual(data['full_name'], 'Ada Lovelace')
        self.assertEqual(data['created_at'], '2026-01-02T03:04:05Z')
        self.assertIsNone(data['last_login'])

    def test_full_name_without_names(self):
        self.assertIsNone(present(_user(first_name=None, last_name=None), USER)['full_name'])

    def test_hash_never_presented_for_any_user(self):
        users = [_user(id=str(i), password_hash=f'hash-{i}', is_admin=bool(i % 2)) for i in range(20)]
        for user in users:
            self.assertNotIn('password_hash', present(user, USER))

    def test_page_nests_users(self):
        page = Page(items=[_user(), _user(id='user-2')], page=1, per_page=2, total=3)

        data = present(page, USER_PAGE)

        self.assertEqual([u['id'] for u in data['users']], ['user-1', 'user-2'])
        self.assertEqual(data['meta'], {'page': 1, 'per_page': 2, 'total': 3, 'total_pages': 2})

    def test_access_token_nests_user(self):
        data = present({'token': 't', 'token_type': 'bearer', 'expires_at': NOW, 'user': _user()}, ACCESS_TOKEN)

        self.assertEqual(data['user']['email'], 'a@example.com')
        self.assertNotIn('password_hash', data['user'])

    def test_none_presents_as_none(self):
        self.assertIsNone(present(None, USER))


class TestPresenterDeclaration(unittest.TestCase):

    def test_sensitive_field_cannot_be_declared(self):
        with self.assertRaises(ValueError):
            Presenter('Bad', ['id', 'password_hash'])
        with self.assertRaises(ValueError):
            Presenter('Bad', [Field('hash', source='password_hash')])

    def test_duplicate_fields_rejected(self):
        with self.assertRaises(ValueError):
            Presenter('Bad', ['id', 'id'])

    def test_source_and_getter_are_exclusive(self):
        with self.assertRaises(ValueError):
            Presenter('Bad', [Field('x', source='a', getter=lambda e: 1)])


class TestNestedPresentation(unittest.TestCase):

    def setUp(self):
        self.member = Presenter('Member', ['name'])
        self.team = Presenter('Team', ['name', Field('members', presenter=self.member, many=True)])

    def test_nested_many(self):
        team = Team('core', members=[Team('a'), Team('b')])

        self.assertEqual(present(team, self.team), {'name': 'core', 'members': [{'name': 'a'}, {'name': 'b'}]})

    def test_same_child_twice_is_not_a_cycle(self):
        shared = Team('shared')
        team = Team('core', members=[shared, shared])

        self.assertEqual(len(present(team, self.team)['members']), 2)

    def test_cycle_is_rejected(self):
        recursive = Presenter('Recursive', ['name'])
        recursive.fields += (Field('parent', presenter=recursive),)
        a = Team('a')
        b = Team('b', parent=a)
        a.parent = b

        with self.assertRaises(PresentationCycleError) as ctx:
            present(a, recursive)
        self.assertIn('cyclic presentation', ctx.exception.message)

    def test_self_reference_is_rejected(self):
        recursive = Presenter('Recursive', ['name'])
        recursive.fields += (Field('members', presenter=recursive, many=True),)
        team = Team('loop')
        team.members.append(team)

        with self.assertRaises(PresentationCycleError):
            present(team, recursive)

    def test_acyclic_recursive_chain(self):
        recursive = Presenter('Recursive', ['name'])
        recursive.fields += (Field('parent', presenter=recursive),)
        root = Team('root')
        leaf = Team('leaf', parent=Team('mid', parent=root))

        data = present(leaf, recursive)

        self.assertEqual(data['parent']['parent']['name'], 'root')
        self.assertIsNone(data['parent']['parent']['parent'])


if __name__ == '__main__':
    unittest.main()
