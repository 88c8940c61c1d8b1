#!/usr/bin/env python3
"""Generate test JWT tokens for API testing.

Usage:
    python scripts/generate_test_token.py [<admin_user_id>] [<employee_user_id>]

The user ids should exist in the users table for the admin listing to
show creator details.
"""
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from tutorial_portal.core.auth import Role
from tutorial_portal.api.deps import issue_smoke_token

admin_id = sys.argv[1] if len(sys.argv) > 1 else "admin-test"
employee_id = sys.argv[2] if len(sys.argv) > 2 else "employee-test"

admin_token = issue_smoke_token(admin_id, role=Role.ADMIN)
print(f"Admin Token:\n{admin_token}\n")

employee_token = issue_smoke_token(employee_id, role=Role.EMPLOYEE)
print(f"Employee Token:\n{employee_token}")
