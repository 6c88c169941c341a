"""
Customers module.

- Create / update / delete customers
- Optional profile image stored under the public asset root
"""
