"""Database schema for the content index (chunks.db)."""

SCHEMA = """
-- Files table: one category tag per discovered file
CREATE TABLE IF NOT EXISTS files (
    file_id TEXT PRIMARY KEY,
    tag     TEXT NOT NULL
);

-- Chunks table: rowid order is ingestion order
CREATE TABLE IF NOT EXISTS chunks (
    chunk_id   TEXT PRIMARY KEY,
    file_id    TEXT NOT NULL,
    text       TEXT NOT NULL,
    source_ref TEXT NOT NULL,  -- JSON
    FOREIGN KEY (file_id) REFERENCES files(file_id)
);

-- Full-text index over chunk text (external content table)
CREATE VIRTUAL TABLE IF NOT EXISTS chunks_fts USING fts5(
    text,
    content='chunks',
    content_rowid='rowid'
);

-- Metadata table: stores index metadata
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT
);

CREATE INDEX IF NOT EXISTS idx_chunks_file ON chunks(file_id);
"""
