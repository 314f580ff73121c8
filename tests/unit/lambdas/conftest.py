"""
Shared pytest fixtures for audit query Lambda tests.
"""

import os
from unittest.mock import Mock

import boto3
import pytest
from moto import mock_aws

# Set AWS region to avoid NoRegionError during imports
os.environ['AWS_DEFAULT_REGION'] = 'us-east-1'

from audit_api.lib import store


@pytest.fixture
def aws_credentials():
    """Mock AWS credentials for moto."""
    os.environ['AWS_ACCESS_KEY_ID'] = 'testing'
    os.environ['AWS_SECRET_ACCESS_KEY'] = 'testing'
    os.environ['AWS_SECURITY_TOKEN'] = 'testing'
    os.environ['AWS_SESSION_TOKEN'] = 'testing'
    os.environ['AWS_DEFAULT_REGION'] = 'us-east-1'


@pytest.fixture
def dynamodb_client(aws_credentials, monkeypatch):
    """Create mock DynamoDB client and install it as the shared handler client."""
    with mock_aws():
        client = boto3.client('dynamodb', region_name='us-east-1')
        monkeypatch.setattr(store, '_client', client)
        yield client


def _gsi(name, hash_key, range_key=None):
    key_schema = [{'AttributeName': hash_key, 'KeyType': 'HASH'}]
    if range_key:
        key_schema.append({'AttributeName': range_key, 'KeyType': 'RANGE'})
    return {
        'IndexName': name,
        'KeySchema': key_schema,
        'Projection': {'ProjectionType': 'ALL'},
    }


@pytest.fixture
def user_audit_table(dynamodb_client):
    """user_audit_table with one GSI per index field."""
    dynamodb_client.create_table(
        TableName='user_audit_table',
        KeySchema=[{'AttributeName': 'auditId', 'KeyType': 'HASH'}],
        AttributeDefinitions=[
            {'AttributeName': 'auditId', 'AttributeType': 'S'},
            {'AttributeName': 'userId', 'AttributeType': 'S'},
            {'AttributeName': 'applicationId', 'AttributeType': 'S'},
            {'AttributeName': 'resourceId', 'AttributeType': 'S'},
        ],
        GlobalSecondaryIndexes=[
            _gsi('userId-index', 'userId'),
            _gsi('applicationId-index', 'applicationId'),
            _gsi('resourceId-index', 'resourceId'),
        ],
        BillingMode='PAY_PER_REQUEST',
    )
    rows = [
        ('a1', 'u1', 'app1', 'r1', '2024-01-01T10:00:00Z', 'admin'),
        ('a2', 'u1', 'app1', 'r2', '2024-01-01T12:00:00Z', 'viewer'),
        ('a3', 'u1', 'app2', 'r1', '2024-01-03T09:00:00Z', 'admin'),
        ('a4', 'u2', 'app1', 'r1', '2024-01-01T11:00:00Z', 'admin'),
    ]
    for audit_id, user_id, app_id, resource_id, ts, role in rows:
        dynamodb_client.put_item(
            TableName='user_audit_table',
            Item={
                'auditId': {'S': audit_id},
                'userId': {'S': user_id},
                'applicationId': {'S': app_id},
                'resourceId': {'S': resource_id},
                'eventTimestamp': {'S': ts},
                'role': {'S': role},
                'retentionPeriodInYears': {'N': '7'},
                'dataAfter': {'M': {'status': {'S': 'active'}, 'flags': {'SS': ['x']}}},
            },
        )
    return 'user_audit_table'


@pytest.fixture
def audit_logs_table(dynamodb_client):
    """AuditLogs table with user_id-index (sort key: timestamp)."""
    dynamodb_client.create_table(
        TableName='AuditLogs',
        KeySchema=[
            {'AttributeName': 'PK_SystemDate', 'KeyType': 'HASH'},
            {'AttributeName': 'SK_AuditDetails', 'KeyType': 'RANGE'},
        ],
        AttributeDefinitions=[
            {'AttributeName': 'PK_SystemDate', 'AttributeType': 'S'},
            {'AttributeName': 'SK_AuditDetails', 'AttributeType': 'S'},
            {'AttributeName': 'user_id', 'AttributeType': 'S'},
            {'AttributeName': 'timestamp', 'AttributeType': 'S'},
        ],
        GlobalSecondaryIndexes=[_gsi('user_id-index', 'user_id', 'timestamp')],
        BillingMode='PAY_PER_REQUEST',
    )
    rows = [
        ('l1', 'u1', '2024-01-01T08:00:00Z', 'LOGIN'),
        ('l2', 'u1', '2024-01-01T09:00:00Z', 'UPDATE'),
        ('l3', 'u1', '2024-01-02T09:00:00Z', 'DELETE'),
        ('l4', 'u2', '2024-01-01T10:00:00Z', 'LOGIN'),
    ]
    for audit_id, user_id, ts, action in rows:
        dynamodb_client.put_item(
            TableName='AuditLogs',
            Item={
                'PK_SystemDate': {'S': f'sys1#{ts[:10]}'},
                'SK_AuditDetails': {'S': f'{ts}#{audit_id}'},
                'audit_id': {'S': audit_id},
                'timestamp': {'S': ts},
                'user_id': {'S': user_id},
                'system_id': {'S': 'sys1'},
                'action_type': {'S': action},
                'retention_years': {'N': '7'},
                'deletion_date': {'S': '2031-01-01'},
            },
        )
    return 'AuditLogs'


@pytest.fixture
def mock_lambda_context():
    """Mock Lambda context object."""
    context = Mock()
    context.function_name = 'test-function'
    context.memory_limit_in_mb = 128
    context.invoked_function_arn = 'arn:aws:lambda:us-east-1:123456789012:function:test'
    context.aws_request_id = 'test-request-id'
    return context
