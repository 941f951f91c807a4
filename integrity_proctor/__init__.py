"""Integrity Proctor - interview proctoring session engine and API"""
