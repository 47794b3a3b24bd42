"""
Shared infrastructure for the API, the maintenance job and the scripts.

- database: Motor client lifecycle and ObjectId parsing
- auth: JWT session tokens and bcrypt password hashing
- utils: Response envelopes, HTTP exceptions, password rules
- config: Base settings loaded from the environment
"""
