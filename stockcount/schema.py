TABLES = ("branches", "products", "inventory")

SCHEMA_SQL = r"""
-- Branches (physical locations holding their own counts)
CREATE TABLE IF NOT EXISTS branches (
  id TEXT PRIMARY KEY,
  name TEXT NOT NULL,
  location TEXT
);

-- Product catalog (independent of any branch)
CREATE TABLE IF NOT EXISTS products (
  id TEXT PRIMARY KEY,
  code TEXT NOT NULL UNIQUE,
  description TEXT
);

-- One row per (branch, product); code/description are copies of the product
CREATE TABLE IF NOT EXISTS inventory (
  id TEXT PRIMARY KEY,
  code TEXT NOT NULL,
  description TEXT,
  physicalCount INTEGER NOT NULL DEFAULT 0,
  systemCount INTEGER NOT NULL DEFAULT 0,
  unitType TEXT NOT NULL DEFAULT 'units',   -- units / cases
  branchId TEXT NOT NULL,
  lastUpdated TEXT,                         -- ISO datetime (UTC)
  FOREIGN KEY (branchId) REFERENCES branches(id) ON DELETE CASCADE
);
"""

INDEX_SQL = r"""
CREATE INDEX IF NOT EXISTS idx_inventory_branch ON inventory(branchId);
CREATE INDEX IF NOT EXISTS idx_inventory_code ON inventory(code);
"""
