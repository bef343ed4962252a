"""MongoDB implementation of UserRepository."""

import uuid
from datetime import datetime, timezone
from logging import getLogger

from pymongo import ASCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from adapter.mongodb.connection import USERS_COLLECTION_NAME
from domain.model.errors import DuplicateError
from domain.model.user import User

logger = getLogger(__name__)

UPDATABLE_FIELDS = frozenset({'first_name', 'last_name', 'password_hash', 'is_admin'})


class MongoUserRepository:
    def __init__(self, db: Database):
        self.db = db
        self.collection = db[USERS_COLLECTION_NAME]

    def ensure_indexes(self) -> bool:
        """Create indexes for users collection."""
        from adapter.mongodb.indexes import create_index_safe

        try:
            create_index_safe(self.collection, [('email', ASCENDING)], 'idx_users_email', unique=True)
            create_index_safe(
                self.collection,
                [('created_at', ASCENDING), ('_id', ASCENDING)],
                'idx_users_created_at_id',
            )
            return True
        except PyMongoError as e:
            logger.error("Failed to create users indexes", extra={"error": str(e)})
            return False

    def _to_domain(self, doc: dict) -> User:
        """Convert MongoDB document to User domain model."""
        return User(
            id=doc['_id'],
            email=doc['email'],
            created_at=doc['created_at'],
            updated_at=doc['updated_at'],
            first_name=doc.get('first_name'),
            last_name=doc.get('last_name'),
            password_hash=doc.get('password_hash'),
            is_admin=doc.get('is_admin', False),
            last_login=doc.get('last_login'),
        )

    def create(
        self,
        email: str,
        password_hash: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
        is_admin: bool = False,
    ) -> User:
        """Insert a user document. The unique email index decides conflicts."""
        user_id = uuid.uuid4().hex
        now = datetime.now(timezone.utc)
        user_doc = {
            '_id': user_id,
            'email': email,
            'password_hash': password_hash,
            'first_name': first_name,
            'last_name': last_name,
            'is_admin': is_admin,
            'created_at': now,
            'updated_at': now,
        }
        try:
            self.collection.insert_one(user_doc)
        except DuplicateKeyError:
            logger.warning("User creation failed: email already exists", extra={"email": email})
            raise DuplicateError("email already taken")

        logger.info("User created", extra={"userId": user_id})
        return self._to_domain(user_doc)

    def update(self, user_id: str, **fields) -> User | None:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        changes = dict(fields, updated_at=datetime.now(timezone.utc))
        doc = self.collection.find_one_and_update(
            {'_id': user_id},
            {'$set': changes},
            return_document=ReturnDocument.AFTER,
        )
        return self._to_domain(doc) if doc else None

    def update_last_login(self, user_id: str) -> bool:
        """Update the last login timestamp for a user. Return True if successful."""
        try:
            now = datetime.now(timezone.utc)
            result = self.collection.update_one(
                {'_id': user_id},
                {'$set': {'last_login': now, 'updated_at': now}}
            )
            return result.modified_count > 0
        except PyMongoError as e:
            logger.error("Failed to update last_login", extra={"userId": user_id, "error": str(e)})
            return False

    def get_by_email(self, email: str) -> User | None:
        doc = self.collection.find_one({'email': email})
        return self._to_domain(doc) if doc else None

    def get_by_id(self, user_id: str) -> User | None:
        doc = self.collection.find_one({'_id': user_id})
        return self._to_domain(doc) if doc else None

    def list(self, skip: int = 0, limit: int = 25) -> list[User]:
        cursor = (
            self.collection.find({})
            .sort([('created_at', ASCENDING), ('_id', ASCENDING)])
            .skip(skip)
            .limit(limit)
        )
        return [self._to_domain(doc) for doc in cursor]

    def count(self) -> int:
        return self.collection.count_documents({})

    def ping(self) -> bool:
        try:
            self.db.client.admin.command('ping')
            return True
        except PyMongoError:
            return False
