#!/usr/bin/env python3
"""Generate JWT tokens for manual API testing.

Usage: generate_test_token.py [USER_ID] [ROLE] [TTL_SECONDS]
"""
import sys
from datetime import timedelta
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.core.auth import Role, create_access_token

if len(sys.argv) > 1:
    user_id = sys.argv[1]
    role = Role(sys.argv[2]) if len(sys.argv) > 2 else Role.LEARNER
    ttl = timedelta(seconds=int(sys.argv[3])) if len(sys.argv) > 3 else None
    print(create_access_token(user_id, role=role.value, expires_delta=ttl))
else:
    admin_token = create_access_token("admin-test", role=Role.ADMIN.value)
    print(f"Admin Token:\n{admin_token}\n")

    learner_token = create_access_token("learner-test", role=Role.LEARNER.value)
    print(f"Learner Token:\n{learner_token}")
