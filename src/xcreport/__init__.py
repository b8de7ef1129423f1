"""xcreport: normalize XCTest results into step trees and grouping trees."""

__version__ = "0.1.0"
