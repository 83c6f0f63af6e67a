from fedms.metadata_statement.flatten import flatten
from fedms.metadata_statement.locate import locate
from fedms.metadata_statement.subset import is_subset
