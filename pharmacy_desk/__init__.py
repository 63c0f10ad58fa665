"""
Back-office service for a community pharmacy: refill and consultation
requests, admin sessions, document store backups to Google Sheets,
transactional email and file uploads.
"""
