"""
Review core: storage, records, comment trees and the project lifecycle.
"""
