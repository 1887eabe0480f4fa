"""
Pairmer v0.1.0

Sequence utility functions for Pairmer.

Provides k-mer decomposition of sequences.
"""

from typing import Iterator, List


def kmer_count(length: int, k: int) -> int:
    """
    Number of overlapping k-mers in a sequence of the given length.
    
    Args:
        length: Sequence length
        k: K-mer size
        
    Returns:
        ``max(0, length + 1 - k)``
    """
    return max(0, length + 1 - k)


def iter_kmers(sequence: str, k: int) -> Iterator[str]:
    """
    Yield every k-mer of a sequence, left to right.
    
    Residues are emitted exactly as given (no case folding), so the k-mer
    stream lines up with what the index engine saw in the same FASTA.
    
    Args:
        sequence: DNA sequence string
        k: K-mer size
        
    Yields:
        Substrings of length k starting at offsets 0..len-k
    """
    for i in range(kmer_count(len(sequence), k)):
        yield sequence[i:i + k]


def extract_kmers(sequence: str, k: int) -> List[str]:
    """
    Extract all k-mers from a sequence.
    
    Args:
        sequence: DNA sequence string
        k: K-mer size
        
    Returns:
        List of k-mer strings
        
    Example:
        >>> extract_kmers("ATCGATCG", 3)
        ['ATC', 'TCG', 'CGA', 'GAT', 'ATC', 'TCG']
    """
    return list(iter_kmers(sequence, k))
