# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
MongoDB service layer with connection pooling and the document-store
planning repository.
"""

import os
import logging
from typing import List, Dict, Optional, Any
from pymongo import MongoClient, ASCENDING, DESCENDING, UpdateOne
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import (
    ConnectionFailure,
    ServerSelectionTimeoutError,
    DuplicateKeyError,
    PyMongoError
)
from opentelemetry import trace
from models.base import utc_now
from models.entities import ActivityLog
from models.enums import ActionStatus
from .repository import (
    PlanningRepository, RepositoryError,
    ACTIONS, DELIVERABLES, EVIDENCES, INDICATORS, LOGS, PROGRAMS, PROJECTS, RISKS, USERS
)

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class MongoDBService:
    """MongoDB connection holder with connection pooling."""

    def __init__(self, connection_string: str = None, database_name: str = None):
        """Initialize MongoDB service with connection pooling."""
        self.connection_string = connection_string or os.getenv(
            'MONGODB_URI',
            'mongodb://localhost:27017/sps_planning_dev'
        )
        self.database_name = database_name or os.getenv('MONGODB_DATABASE', 'sps_planning_dev')
        self._client: Optional[MongoClient] = None
        self._database: Optional[Database] = None

        # Connection pool settings
        self.max_pool_size = int(os.getenv('MONGODB_MAX_POOL_SIZE', '10'))
        self.min_pool_size = int(os.getenv('MONGODB_MIN_POOL_SIZE', '1'))
        self.max_idle_time_ms = int(os.getenv('MONGODB_MAX_IDLE_TIME_MS', '30000'))
        self.server_selection_timeout_ms = int(os.getenv('MONGODB_SERVER_SELECTION_TIMEOUT_MS', '5000'))

        logger.info(f"MongoDB service initialized for database: {self.database_name}")

    @property
    def client(self) -> MongoClient:
        """Get MongoDB client with connection pooling."""
        if self._client is None:
            try:
                self._client = MongoClient(
                    self.connection_string,
                    maxPoolSize=self.max_pool_size,
                    minPoolSize=self.min_pool_size,
                    maxIdleTimeMS=self.max_idle_time_ms,
                    serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                    retryWrites=True,
                    retryReads=True
                )
                self._client.admin.command('ping')
                logger.info("MongoDB connection established successfully")
            except (ConnectionFailure, ServerSelectionTimeoutError) as e:
                logger.error(f"Failed to connect to MongoDB: {e}")
                raise RepositoryError(f"MongoDB unavailable: {e}")

        return self._client

    @property
    def database(self) -> Database:
        """Get MongoDB database."""
        if self._database is None:
            self._database = self.client[self.database_name]
        return self._database

    def get_collection(self, collection_name: str) -> Collection:
        """Get MongoDB collection."""
        return self.database[collection_name]

    def close_connection(self) -> None:
        """Close MongoDB connection."""
        if self._client:
            self._client.close()
            self._client = None
            self._database = None
            logger.info("MongoDB connection closed")

    def health_check(self) -> Dict[str, Any]:
        """Check MongoDB connection health."""
        try:
            result = self.client.admin.command('ping')
            server_info = self.client.server_info()

            return {
                'status': 'healthy',
                'ping': result.get('ok') == 1,
                'version': server_info.get('version'),
                'database': self.database_name,
                'connection_pool_size': self.max_pool_size
            }
        except Exception as e:
            logger.error(f"MongoDB health check failed: {e}")
            return {
                'status': 'unhealthy',
                'error': str(e),
                'database': self.database_name
            }

    # Index Management

    def create_indexes(self) -> None:
        """Create the parent-id and feed indexes the planning queries rely on."""
        try:
            logger.info("Creating MongoDB indexes...")

            programs = self.get_collection(PROGRAMS)
            programs.create_index([("unitId", ASCENDING)])
            programs.create_index([("axisId", ASCENDING)])

            for name in (PROJECTS, INDICATORS, RISKS):
                self.get_collection(name).create_index([("programId", ASCENDING)])

            actions = self.get_collection(ACTIONS)
            actions.create_index([("programId", ASCENDING)])
            actions.create_index([("projectId", ASCENDING)])
            actions.create_index([("status", ASCENDING), ("endDate", ASCENDING)])
            actions.create_index([("responsibleId", ASCENDING), ("isMeetingDemand", ASCENDING)])

            self.get_collection(DELIVERABLES).create_index([("actionId", ASCENDING)])
            self.get_collection(EVIDENCES).create_index([("actionId", ASCENDING)])

            self.get_collection(USERS).create_index([("email", ASCENDING)], unique=True)

            logs = self.get_collection(LOGS)
            logs.create_index([("createdAt", DESCENDING)])
            logs.create_index([("entity", ASCENDING), ("entityId", ASCENDING)])

            logger.info("MongoDB indexes created successfully")

        except PyMongoError as e:
            logger.error(f"Failed to create MongoDB indexes: {e}")
            raise


def _from_mongo(document: Dict[str, Any]) -> Dict[str, Any]:
    """Replace the Mongo _id with a string id."""
    document = dict(document)
    if "_id" in document:
        document["id"] = str(document.pop("_id"))
    return document


class MongoPlanningRepository(PlanningRepository):
    """Planning repository backed by MongoDB collections."""

    name = "mongodb"

    def __init__(self, service: MongoDBService):
        self.service = service

    def _collection(self, name: str) -> Collection:
        return self.service.get_collection(name)

    def _find(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        with tracer.start_as_current_span("mongodb.find") as span:
            span.set_attributes({"db.collection": collection})
            try:
                documents = [_from_mongo(doc) for doc in self._collection(collection).find(filters or {})]
                span.set_attribute("db.result_count", len(documents))
                logger.debug(f"Found {len(documents)} documents in {collection}")
                return documents
            except PyMongoError as e:
                logger.error(f"Failed to find documents in {collection}: {e}")
                raise RepositoryError(f"Failed to read {collection}", collection)

    def _get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        try:
            document = self._collection(collection).find_one({"_id": doc_id})
        except PyMongoError as e:
            logger.error(f"Failed to find document {doc_id} in {collection}: {e}")
            raise RepositoryError(f"Failed to read {collection}", collection)

        if document is None:
            logger.debug(f"Document {doc_id} not found in {collection}")
            return None
        return _from_mongo(document)

    def _insert(self, collection: str, doc_id: str, document: Dict[str, Any]) -> None:
        document = dict(document)
        document["_id"] = doc_id
        try:
            self._collection(collection).insert_one(document)
            logger.info(f"Created document in {collection}: {doc_id}")
        except DuplicateKeyError as e:
            logger.error(f"Duplicate key error in {collection}: {e}")
            raise RepositoryError("Document with this identifier already exists", collection)
        except PyMongoError as e:
            logger.error(f"Failed to create document in {collection}: {e}")
            raise RepositoryError(f"Failed to write {collection}", collection)

    def _update(self, collection: str, doc_id: str, updates: Dict[str, Any]) -> bool:
        try:
            result = self._collection(collection).update_one({"_id": doc_id}, {"$set": updates})
        except PyMongoError as e:
            logger.error(f"Failed to update document {doc_id} in {collection}: {e}")
            raise RepositoryError(f"Failed to write {collection}", collection)

        if result.matched_count > 0:
            logger.info(f"Updated document {doc_id} in {collection}")
            return True
        logger.warning(f"No document updated for {doc_id} in {collection}")
        return False

    def _delete(self, collection: str, doc_id: str) -> bool:
        try:
            result = self._collection(collection).delete_one({"_id": doc_id})
        except PyMongoError as e:
            logger.error(f"Failed to delete document {doc_id} in {collection}: {e}")
            raise RepositoryError(f"Failed to write {collection}", collection)
        return result.deleted_count > 0

    def health_check(self) -> Dict[str, Any]:
        return self.service.health_check()

    def update_action_statuses(self, changes: List) -> int:
        """Write all status changes with a single bulk_write."""
        if not changes:
            return 0

        now = utc_now().isoformat()
        operations = [
            UpdateOne(
                {"_id": change.action_id},
                {"$set": {"status": ActionStatus(change.new_status).value, "updatedAt": now}}
            )
            for change in changes
        ]

        with tracer.start_as_current_span("mongodb.bulk_write") as span:
            span.set_attributes({"db.collection": ACTIONS, "db.operation_count": len(operations)})
            try:
                result = self._collection(ACTIONS).bulk_write(operations, ordered=False)
            except PyMongoError as e:
                logger.error(f"Failed to batch update action statuses: {e}")
                raise RepositoryError("Failed to write actions", ACTIONS)

        return result.matched_count

    def has_evidence(self, action_id: str) -> bool:
        try:
            return self._collection(EVIDENCES).find_one({"actionId": action_id}) is not None
        except PyMongoError as e:
            logger.error(f"Failed to check evidence for action {action_id}: {e}")
            raise RepositoryError("Failed to read evidences", EVIDENCES)

    def get_recent_activity(self, limit: int = 5) -> List[ActivityLog]:
        try:
            cursor = self._collection(LOGS).find({}).sort("createdAt", DESCENDING).limit(limit)
            return self._to_entities(ActivityLog, LOGS, map(_from_mongo, cursor))
        except PyMongoError as e:
            logger.error(f"Failed to read recent activity: {e}")
            raise RepositoryError("Failed to read logs", LOGS)


# Singleton instance for application use
_mongodb_service: Optional[MongoDBService] = None


def get_mongodb_service() -> MongoDBService:
    """Get singleton MongoDB service instance."""
    global _mongodb_service
    if _mongodb_service is None:
        _mongodb_service = MongoDBService()
    return _mongodb_service


def close_mongodb_connection() -> None:
    """Close MongoDB connection (for cleanup)."""
    global _mongodb_service
    if _mongodb_service:
        _mongodb_service.close_connection()
