"""School attendance package.

Feature modules (attendance, reports, alerts, notifications, commission,
accounts) each pair a repository protocol with its MySQL adapter and a
service layer; Flask controllers stay thin.
"""
