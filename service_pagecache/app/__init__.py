"""
Drupal page cache reader service.
"""
