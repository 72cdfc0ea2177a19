"""
RondaGuard Backend - Services Layer
===================================

What:  Business logic between the routes (HTTP) and the database façade.
How:   Stateless singletons; every operation takes the `Database` as its
       first argument.

Service Inventory:
    - UpsertEngine:      atomic multi-table write of one aggregate
    - AggregateReader:   batched read of roots and their children
    - UserService:       users and login
    - TemplateService:   checklist templates
    - TaskService:       tasks and their checklists
    - RoundService:      append-only round logs with photos
    - SettingsService:   singleton tenant settings
"""
