# Services package init
"""
Inkwell Backend: Services Layer
=================================

Service Inventory:
    - SessionTokenCodec: signs/verifies session tokens (token_service.py)
    - AuthGuard / authorize_ownership: identity and authorship checks
    - FileService: cover upload storage
    - UserService: registration and credential checks
    - PostService: post lifecycle (create/read/list/update/delete)

Stateless services (UserService) are module-level singletons. Services that
need configuration (codec, guard, files, posts) are built by create_app()
and reached through inkwell.dependencies.
"""
