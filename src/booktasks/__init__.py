"""Task family handlers live here.

Add modules like `gitbook.py`, `gh_pages.py`, etc., and decorate handler functions with
`@taskrunner.handler("<family>")`. Each handler is called once per configured target.

Do not implement logic here unless it's shared helpers; keep handlers modular per file.
"""
