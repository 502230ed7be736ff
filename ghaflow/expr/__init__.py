"""Expression lexing and parsing, and the truthiness, coercion and comparison rules."""