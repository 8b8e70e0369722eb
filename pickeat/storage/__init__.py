"""PostgreSQL storage for recipes and their reference data."""