# Services package init
"""
BottleNet Backend: Services Layer
===================================

Service Inventory:
    - RecipientSelector: uniform random pick of "some other user"
    - MessageService: create / respond / drop / keep (the message lifecycle)
    - UserService: register and list users

Services receive the DocumentStore through their constructor and can be
unit-tested against any store without HTTP.
"""
