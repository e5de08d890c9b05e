"""
Approval center.

- Applications arrive from the public join form as `pending`
- Approval provisions exactly one account + profile with a membership id
- Rejection requires a reason
- Reviewers only see and decide applications inside their scope
"""
