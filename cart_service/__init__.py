# cart_service/__init__.py
