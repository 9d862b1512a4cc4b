"""Identity-mapping page tables using 2 MiB pages."""

from __future__ import annotations

from dataclasses import dataclass

PAGE_SIZE_4K = 4096
PAGE_SIZE_2M = 512 * PAGE_SIZE_4K
PAGE_SIZE_1G = 512 * PAGE_SIZE_2M
ENTRIES_PER_TABLE = 512
PAGE_DIRECTORY_COUNT = 64

PRESENT_WRITABLE = 0x003
LARGE_PAGE = 0x080


@dataclass(frozen=True)
class IdentityPageTables:
    """The PML4, page-directory-pointer table and page directories of a mapping."""

    pml4: list[int]
    pdp: list[int]
    directories: list[list[int]]


def build_identity_page_tables(
    pdp_address: int, directory_address: int, directory_count: int = PAGE_DIRECTORY_COUNT
) -> IdentityPageTables:
    """Build tables mapping the first ``directory_count`` GiB onto themselves.

    ``pdp_address`` is where the PDP table lives and ``directory_address``
    where the page directories start, one 4 KiB table after another.
    """
    if pdp_address % PAGE_SIZE_4K or directory_address % PAGE_SIZE_4K:
        raise ValueError("page tables must be 4 KiB aligned")
    if not 0 < directory_count <= ENTRIES_PER_TABLE:
        raise ValueError(f"directory count must be 1..{ENTRIES_PER_TABLE}, got {directory_count}")

    pml4 = [0] * ENTRIES_PER_TABLE
    pml4[0] = pdp_address | PRESENT_WRITABLE

    pdp = [0] * ENTRIES_PER_TABLE
    directories = []
    for i_pdpt in range(directory_count):
        pdp[i_pdpt] = (directory_address + i_pdpt * PAGE_SIZE_4K) | PRESENT_WRITABLE
        directories.append(
            [
                (i_pdpt * PAGE_SIZE_1G + i_pd * PAGE_SIZE_2M) | LARGE_PAGE | PRESENT_WRITABLE
                for i_pd in range(ENTRIES_PER_TABLE)
            ]
        )
    return IdentityPageTables(pml4, pdp, directories)